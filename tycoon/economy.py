"""
Economy engine: rent, purchases, building upgrades and bankruptcy.

Every function here mutates the working state it is handed. Callers in
`tycoon.rules` pass a copy, so the caller's state is never touched.
"""

import logging
from typing import Optional

from tycoon.exceptions import InvalidActionError
from tycoon.game import GameState
from tycoon.money import EventType, LogLevel
from tycoon.player import PlayerState
from tycoon.spaces import ColorGroup, TileType

logger = logging.getLogger(__name__)


def owns_group(state: GameState, player_id: Optional[str], group: ColorGroup) -> bool:
    """Check if a player owns every tile in a group."""
    if player_id is None or group == ColorGroup.NONE:
        return False
    tile_ids = state.board.get_color_group(group)
    return bool(tile_ids) and all(state.tile_state(t).owner_id == player_id for t in tile_ids)


def count_owned(state: GameState, player_id: str, group: ColorGroup) -> int:
    """Number of tiles in a group held by a player."""
    return sum(1 for t in state.board.get_color_group(group) if state.tile_state(t).owner_id == player_id)


def calculate_rent(state: GameState, tile_id: int) -> int:
    """
    Calculate the rent owed for landing on an owned tile.

    - Property: tier rent for the building count, doubled on an unimproved
      tile whose owner holds the whole color group.
    - Station: base rent doubled for every additional station owned.
    - Utility: dice sum times 4 (one utility) or 10 (both).

    Returns:
        Rent amount, 0 for unowned or non-rentable tiles
    """
    spec = state.tile_spec(tile_id)
    tile = state.tile_state(tile_id)
    if not tile.is_owned():
        return 0

    owner_id = tile.owner_id

    if spec.tile_type == TileType.PROPERTY:
        rent = spec.rent_for(tile.buildings)
        if tile.buildings == 0 and owns_group(state, owner_id, spec.group):
            rent *= 2
        return rent

    if spec.tile_type == TileType.STATION:
        stations_owned = count_owned(state, owner_id, ColorGroup.STATION)
        return state.config.station_base_rent * (2 ** (stations_owned - 1))

    if spec.tile_type == TileType.UTILITY:
        utilities_owned = count_owned(state, owner_id, ColorGroup.UTILITY)
        multiplier = 10 if utilities_owned >= 2 else 4
        return sum(state.dice) * multiplier

    return 0


def charge(state: GameState, payer: PlayerState, amount: int, creditor: Optional[PlayerState] = None) -> bool:
    """
    Move money from a payer to a creditor (or to the bank when None).

    The full amount always changes hands. Returns True when the payment
    left the payer below zero, i.e. the payer is now insolvent.
    """
    payer.money -= amount
    if creditor is not None:
        creditor.money += amount
    return payer.money < 0


def pay_rent(state: GameState, payer: PlayerState, tile_id: int) -> bool:
    """
    Charge rent for an owned tile. Returns True if the payer went insolvent.
    """
    tile = state.tile_state(tile_id)
    owner = state.get_player(tile.owner_id) if tile.owner_id else None
    if owner is None or owner.is_bankrupt or owner.player_id == payer.player_id:
        return False

    spec = state.tile_spec(tile_id)
    rent = calculate_rent(state, tile_id)

    if spec.tile_type == TileType.PROPERTY and tile.buildings == 0 and owns_group(state, owner.player_id, spec.group):
        state.log(
            EventType.RENT_PAYMENT,
            f"Rent doubled! {owner.name} owns the whole {spec.group.value} group.",
            owner.player_id,
            LogLevel.WARNING,
        )
    elif spec.tile_type == TileType.UTILITY:
        state.log(
            EventType.RENT_PAYMENT,
            f"Utility rent: dice {sum(state.dice)} x {rent // max(sum(state.dice), 1)}",
            owner.player_id,
        )

    insolvent = charge(state, payer, rent, owner)
    state.log(
        EventType.RENT_PAYMENT,
        f"{payer.name} pays ${rent} rent to {owner.name}.",
        payer.player_id,
        LogLevel.DANGER,
        owner=owner.player_id,
        tile_id=tile_id,
        amount=rent,
        payer_balance=payer.money,
        owner_balance=owner.money,
    )
    return insolvent


def pay_tax(state: GameState, player: PlayerState, tile_id: int) -> bool:
    """Deduct a tile's tax unconditionally. Returns True if the player went insolvent."""
    spec = state.tile_spec(tile_id)
    amount = spec.tax_amount
    insolvent = charge(state, player, amount)
    state.log(
        EventType.TAX_PAYMENT,
        f"{player.name} pays ${amount} {spec.name}.",
        player.player_id,
        LogLevel.DANGER,
        amount=amount,
        new_balance=player.money,
    )
    return insolvent


def buy_property(state: GameState, player: PlayerState, tile_id: int) -> None:
    """
    Player buys the tile at the given position from the bank.

    Raises:
        InvalidActionError: tile not purchasable, already owned, or unaffordable
    """
    spec = state.tile_spec(tile_id)
    tile = state.tile_state(tile_id)

    if not spec.is_purchasable:
        raise InvalidActionError(f"{spec.name} cannot be bought.")
    if tile.is_owned():
        raise InvalidActionError(f"{spec.name} is already owned.")
    if player.money < spec.price:
        raise InvalidActionError(f"{player.name} cannot afford {spec.name} (${spec.price}).")

    player.money -= spec.price
    player.properties.add(tile_id)
    tile.owner_id = player.player_id

    state.log(
        EventType.PURCHASE,
        f"{player.name} buys {spec.name} for ${spec.price}.",
        player.player_id,
        LogLevel.SUCCESS,
        tile_id=tile_id,
        price=spec.price,
        new_balance=player.money,
    )


def can_upgrade(state: GameState, player: PlayerState, tile_id: int) -> bool:
    try:
        _check_upgrade(state, player, tile_id)
    except InvalidActionError:
        return False
    return True


def _check_upgrade(state: GameState, player: PlayerState, tile_id: int) -> None:
    spec = state.tile_spec(tile_id)
    tile = state.tile_state(tile_id)

    if spec.tile_type != TileType.PROPERTY:
        raise InvalidActionError(f"{spec.name} cannot be built on.")
    if tile.owner_id != player.player_id:
        raise InvalidActionError(f"{player.name} does not own {spec.name}.")
    if not owns_group(state, player.player_id, spec.group):
        raise InvalidActionError(f"{player.name} needs the whole {spec.group.value} group to build.")
    if tile.buildings >= state.config.max_buildings:
        raise InvalidActionError(f"{spec.name} is already at the top tier.")
    if player.money < spec.building_cost:
        raise InvalidActionError(f"{player.name} cannot afford to upgrade {spec.name}.")


def upgrade_property(state: GameState, player: PlayerState, tile_id: int) -> None:
    """
    Add exactly one building to a tile.

    Requirements:
    - Player owns the tile
    - Player holds every tile in the color group
    - Tile is below the top tier
    - Player can afford the building cost

    Raises:
        InvalidActionError: any requirement is not met
    """
    _check_upgrade(state, player, tile_id)

    spec = state.tile_spec(tile_id)
    tile = state.tile_state(tile_id)

    player.money -= spec.building_cost
    tile.buildings += 1

    level = "a hotel" if tile.has_hotel() else f"{tile.buildings} building(s)"
    state.log(
        EventType.UPGRADE,
        f"{player.name} upgrades {spec.name} to {level} (-${spec.building_cost}).",
        player.player_id,
        LogLevel.SUCCESS,
        tile_id=tile_id,
        cost=spec.building_cost,
        buildings=tile.buildings,
        new_balance=player.money,
    )


def pay_bail(state: GameState, player: PlayerState) -> None:
    """
    Player pays bail to leave jail voluntarily.

    Raises:
        InvalidActionError: player not jailed or below the bail fee
    """
    fee = state.config.bail_fee
    if not player.in_jail:
        raise InvalidActionError(f"{player.name} is not in jail.")
    if player.money < fee:
        raise InvalidActionError(f"{player.name} cannot afford the ${fee} bail.")

    player.money -= fee
    player.in_jail = False
    player.jail_turns = 0
    player.consecutive_doubles = 0

    state.log(
        EventType.JAIL_RELEASE,
        f"{player.name} pays ${fee} bail and walks free!",
        player.player_id,
        LogLevel.SUCCESS,
        method="bail",
        amount=fee,
    )


def declare_bankruptcy(state: GameState, player: PlayerState, surrendered: bool = False) -> None:
    """
    Mark a player bankrupt and release every tile they own back to the bank.

    Released tiles lose their buildings and become purchasable again.
    A surrendering player's remaining cash is forfeited to the bank.
    """
    released = sorted(player.properties)
    for tile_id in released:
        tile = state.tile_state(tile_id)
        tile.owner_id = None
        tile.buildings = 0
    player.properties.clear()
    player.is_bankrupt = True
    player.in_jail = False
    player.jail_turns = 0
    player.consecutive_doubles = 0
    if surrendered:
        player.money = 0

    message = (
        f"{player.name} surrenders and declares bankruptcy!"
        if surrendered
        else f"{player.name} is bankrupt!"
    )
    state.log(
        EventType.SURRENDER if surrendered else EventType.BANKRUPTCY,
        message,
        player.player_id,
        LogLevel.DANGER,
        released=released,
        balance=player.money,
    )
    logger.info("Player %s bankrupt (surrendered=%s), released %d tiles", player.player_id, surrendered, len(released))
