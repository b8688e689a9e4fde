"""Ranking helpers over player totals."""

from .models import Player


def get_score_rank(target: float, all_values: list[float]) -> int:
    """
    Dense rank: tied scores share a rank and the next rank follows directly.

    Example: 100, 100, 90 -> 1, 1, 2
    """
    if not all_values:
        return 1
    unique_sorted = sorted(set(all_values), reverse=True)
    if target not in unique_sorted:
        return len(unique_sorted) + 1
    return unique_sorted.index(target) + 1


def get_player_rank(target: float, all_values: list[float]) -> int:
    """
    Standard competition rank: tied scores share a rank and the next rank skips.

    Example: 100, 100, 90 -> 1, 1, 3
    """
    better_count = sum(1 for v in all_values if v > target)
    return better_count + 1


def get_tie_count(target: float, all_values: list[float]) -> int:
    """Number of players sharing this score (at least 1)."""
    if not all_values:
        return 1
    return max(1, sum(1 for v in all_values if v == target))


def get_winners(players: list[Player]) -> list[str]:
    """Ids of every player holding the highest total."""
    if not players:
        return []
    best = max(p.total_score for p in players)
    return [p.id for p in players if p.total_score == best]


def rank_players(players: list[Player]) -> list[tuple[int, Player]]:
    """Players sorted by total (highest first) with their competition rank."""
    totals = [p.total_score for p in players]
    ordered = sorted(players, key=lambda p: p.total_score, reverse=True)
    return [(get_player_rank(p.total_score, totals), p) for p in ordered]
