"""JSON file I/O for templates, sessions and configuration."""

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .models import GameSession, player_from_dict, player_to_dict
from .schemas import GameTemplate

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('scoresheet.storage')


def read_json(path: Path | str, schema: type[T] | None = None) -> Any | T:
    """
    Read a JSON file, optionally validating it against a pydantic model.

    Args:
        path: Path to JSON file
        schema: Optional pydantic model to validate against

    Returns:
        Parsed JSON (validated model if schema provided)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        ValueError: If schema validation fails
    """
    path = Path(path)
    logger.debug(f'Reading JSON from: {path}')

    if not path.exists():
        logger.error(f'File not found: {path}')
        raise FileNotFoundError(f'File not found: {path}')

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
        raise json.JSONDecodeError(f'Invalid JSON in {path}: {e.msg}', e.doc, e.pos) from e

    if schema is None:
        return data

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f'Schema validation failed for {path}: {e}')
        raise ValueError(f'Schema validation failed for {path}:\n{e}') from e


def write_json(path: Path | str, data: Any, indent: int = 2) -> None:
    """
    Write data as JSON, creating parent directories.

    Pydantic models are dumped first.

    Raises:
        TypeError: If data is not JSON-serializable
        OSError: If file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    json_data = data.model_dump(mode='json') if isinstance(data, BaseModel) else data

    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(json_data, f, indent=indent, ensure_ascii=False)
    except TypeError as e:
        logger.error(f'Data is not JSON-serializable: {e}')
        raise TypeError(f'Data is not JSON-serializable: {e}') from e
    logger.debug(f'Wrote JSON to: {path}')


def read_json_safe(path: Path | str, default: Any = None, schema: type[T] | None = None) -> Any | T:
    """Like read_json, but returns default for missing, malformed or invalid files."""
    try:
        return read_json(path, schema=schema)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        return default


def import_template(source: Path | str | dict[str, Any]) -> GameTemplate:
    """
    Import a template from a JSON file or an already-parsed dict.

    Imported templates always get a fresh id and creation time so they
    never collide with an existing template. Columns missing an id get a
    generated one; the engine relies on ids being present and unique.

    Args:
        source: Path to a template JSON file, or its parsed contents

    Returns:
        Validated GameTemplate

    Raises:
        FileNotFoundError: If a path is given and doesn't exist
        json.JSONDecodeError: If the file is malformed
        ValueError: If required fields are missing or validation fails

    Example:
        template = import_template('templates/agricola.json')
    """
    data = source if isinstance(source, dict) else read_json(source)

    if not isinstance(data, dict) or not data.get('name') or not isinstance(data.get('columns'), list):
        logger.error('Template import is missing required fields (name, columns)')
        raise ValueError('Invalid template: missing required fields (name, columns)')

    repaired = 0
    columns = []
    for column in data['columns']:
        if not isinstance(column, dict):
            raise ValueError(f'Invalid template: column entry is not an object: {column!r}')
        if not column.get('id'):
            column = {**column, 'id': uuid.uuid4().hex}
            repaired += 1
        columns.append(column)

    if repaired:
        logger.info(f'Assigned ids to {repaired} column(s) in imported template {data["name"]!r}')

    payload = {
        **data,
        'id': uuid.uuid4().hex,
        'created_at': time.time(),
        'columns': columns,
    }

    try:
        return GameTemplate.model_validate(payload)
    except ValidationError as e:
        logger.error(f'Template {data["name"]!r} failed validation: {e}')
        raise ValueError(f'Invalid template {data["name"]!r}:\n{e}') from e


def export_template(template: GameTemplate, path: Path | str) -> None:
    """Write a template as JSON."""
    write_json(path, template)
    logger.info(f'Exported template {template.name!r} to {path}')


def load_template(path: Path | str) -> GameTemplate:
    """Load a previously exported template, keeping its id."""
    return read_json(path, schema=GameTemplate)


def session_to_dict(session: GameSession) -> dict[str, Any]:
    return {
        'id': session.id,
        'template_id': session.template_id,
        'start_time': session.start_time,
        'status': session.status,
        'players': [player_to_dict(p) for p in session.players],
    }


def session_from_dict(data: dict[str, Any]) -> GameSession:
    return GameSession(
        id=data['id'],
        template_id=data['template_id'],
        start_time=float(data.get('start_time', 0.0)),
        status=data.get('status', 'active'),
        players=[player_from_dict(p) for p in data.get('players', [])],
    )


def save_session(session: GameSession, path: Path | str) -> None:
    write_json(path, session_to_dict(session))
    logger.info(f'Saved session {session.id} to {path}')


def load_session(path: Path | str) -> GameSession:
    """
    Load a saved session.

    Cached totals are read as stored; ScoreSession recomputes them against
    the template before they are shown.
    """
    data = read_json(path)
    try:
        return session_from_dict(data)
    except (KeyError, TypeError) as e:
        logger.error(f'Malformed session file {path}: {e}')
        raise ValueError(f'Malformed session file {path}: {e}') from e


def validate_template_file(path: Path | str) -> tuple[bool, str | None]:
    """
    Check whether a file holds a valid template without keeping it.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        load_template(path)
        return True, None
    except FileNotFoundError:
        return False, f'File not found: {path}'
    except json.JSONDecodeError as e:
        return False, f'Invalid JSON: {e.msg} at position {e.pos}'
    except ValueError as e:
        return False, str(e)
