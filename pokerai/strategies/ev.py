"""
Expected-value formulas shared by every strategy.

All strategies price fold/call/raise with the same constants, so they are
held in one frozen parameter set rather than tuned per strategy.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EVParams:
    """Tunable EV bonuses and penalties."""
    fold_penalty: float = 12.0
    call_bonus: float = 8.0             # Applied to calls of small_bet or less
    raise_bonus: float = 15.0
    small_bet: int = 20

    # Search leaf adjustments
    aggression_threshold: float = 0.7
    aggression_bonus: float = 0.1       # Fraction of pot, raises only
    button_bonus: float = 0.05          # Fraction of pot


DEFAULT_EV_PARAMS = EVParams()


def call_ev(
    win_probability: float,
    pot_size: float,
    call_amount: float,
    params: EVParams = DEFAULT_EV_PARAMS,
) -> float:
    """
    EV of calling.

    Args:
        win_probability: Chance of winning at showdown (0-1)
        pot_size: Pot before calling
        call_amount: Chips required to call

    Returns:
        Expected chips won, including the small-bet bonus
    """
    bonus = params.call_bonus if call_amount <= params.small_bet else 0.0
    return win_probability * pot_size - (1 - win_probability) * call_amount + bonus


def raise_ev(
    win_probability: float,
    pot_size: float,
    raise_amount: float,
    params: EVParams = DEFAULT_EV_PARAMS,
) -> float:
    """EV of raising ``raise_amount`` into ``pot_size``."""
    new_pot = pot_size + raise_amount
    return (
        win_probability * new_pot
        - (1 - win_probability) * raise_amount
        + params.raise_bonus
    )


def fold_ev(current_bet: float, params: EVParams = DEFAULT_EV_PARAMS) -> float:
    """EV of folding: the chips already committed, plus a flat penalty."""
    return -current_bet - params.fold_penalty


def pot_odds(call_amount: float, pot_size: float) -> float:
    """Share of the final pot we must put in to call."""
    if call_amount <= 0:
        return 0.0
    return call_amount / (pot_size + call_amount)


def leaf_value(
    hand_strength: float,
    pot_size: float,
    bet_amount: float,
    raising: bool = False,
    on_button: bool = False,
    params: EVParams = DEFAULT_EV_PARAMS,
) -> float:
    """
    Leaf evaluation for the search strategies.

    Showdown EV of putting ``bet_amount`` into ``pot_size``, plus an
    aggression bonus for strong raises and a button position bonus.
    """
    win_probability = hand_strength
    pot = pot_size + bet_amount if raising else pot_size
    value = win_probability * pot - (1 - win_probability) * bet_amount

    if raising and hand_strength > params.aggression_threshold:
        value += params.aggression_bonus * pot_size
    if on_button:
        value += params.button_bonus * pot_size

    return value


def showdown_value(our_strength: float, opponent_strength: float, win_value: float,
                   lose_value: float) -> float:
    """Value of a showdown decided by comparing strengths; ties are worth 0."""
    if our_strength > opponent_strength:
        return win_value
    if our_strength < opponent_strength:
        return lose_value
    return 0.0


def raise_candidates(
    pot_size: int,
    call_amount: int,
    min_raise: int,
    chips: int,
    pot_fractions: tuple[float, ...],
) -> list[int]:
    """
    Legal raise sizes: the minimum raise plus pot-fraction sizes.

    Keeps sizes that are affordable, at least the minimum raise and larger
    than the call amount. Order is preserved and duplicates dropped.
    """
    sizes = [min_raise] + [int(pot_size * f) for f in pot_fractions]
    candidates = []
    for amount in sizes:
        if amount in candidates:
            continue
        if min_raise <= amount <= chips and amount > call_amount:
            candidates.append(amount)
    return candidates
