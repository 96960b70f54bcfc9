from typing import Any, Dict, List


def score_ledger(ledger, players) -> int:
    """Apply flat scoring for the ended question.

    +1 to each player whose entry is correct. Entries of players who already
    left are skipped. Returns the number of points awarded.
    """
    awarded = 0
    for sid, entry in ledger.items():
        if not entry.correct:
            continue
        player = players.get(sid)
        if player:
            player.score += 1
            awarded += 1
    return awarded


def leaderboard(players) -> List[Dict[str, Any]]:
    # sorted() is stable, so equal scores keep join order and get distinct ranks
    ordered = sorted(players.values(), key=lambda p: p.score, reverse=True)
    return [{'rank': i + 1, 'name': p.name, 'score': p.score} for i, p in enumerate(ordered)]
