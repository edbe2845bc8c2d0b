from dataclasses import dataclass, field
from typing import List, Literal, Optional
from . import commands
from .countries import CountryRegistry
from .model import Coordinates, GameLog, SimulationState
from .rng import DRNG
from .simulation import run_tick

OrderKind = Literal["place_hq", "place_base", "produce_unit", "deploy", "fire_missile", "set_speed"]

@dataclass
class Order:
    kind: OrderKind
    position: Optional[Coordinates] = None  # build site, deploy destination or missile target
    base_type: Optional[str] = None
    base_id: Optional[str] = None
    unit_type: Optional[str] = None
    unit_ids: List[str] = field(default_factory=list)
    missile_type: Optional[str] = None
    speed: Optional[int] = None

class Engine:
    """Deterministic simulation driver: queued orders, then one tick."""

    def __init__(self, seed: int, initial_state: SimulationState,
                 registry: Optional[CountryRegistry] = None):
        self.state = initial_state
        self.registry = registry or CountryRegistry.load_default()
        self._rng = DRNG(seed)
        self._pending_orders: List[Order] = []

    def apply_orders(self, orders: List[Order]) -> None:
        """Queue orders to be applied on next step."""
        self._pending_orders.extend(orders)

    def _apply(self, o: Order) -> None:
        s, rng = self.state, self._rng
        if o.kind == "place_hq" and o.position is not None:
            s = commands.place_hq(s, o.position, rng, self.registry)
        elif o.kind == "place_base" and o.position is not None and o.base_type:
            s = commands.place_base(s, o.base_type, o.position, rng, self.registry)
        elif o.kind == "produce_unit" and o.base_id and o.unit_type:
            s = commands.produce_unit(s, o.base_id, o.unit_type, rng)
        elif o.kind == "deploy" and o.position is not None:
            s = commands.deploy_units(s, o.unit_ids, o.position)
        elif o.kind == "fire_missile" and o.base_id and o.missile_type and o.position is not None:
            s = commands.fire_missile(s, o.base_id, o.missile_type, o.position, rng, self.registry)
        elif o.kind == "set_speed" and o.speed is not None:
            s = commands.set_speed(s, o.speed)
        self.state = s

    def _apply_orders_now(self) -> None:
        for o in self._pending_orders:
            self._apply(o)
        self._pending_orders.clear()

    def apply_pending(self) -> List[GameLog]:
        """Apply queued orders without advancing time."""
        self._apply_orders_now()
        return self.state.drain_journal()

    def step(self) -> List[GameLog]:
        """Apply queued orders, advance one tick, return the new journal entries."""
        self._apply_orders_now()
        self.state = run_tick(self.state, self._rng, self.registry)
        return self.state.drain_journal()

    def snapshot(self) -> SimulationState:
        """Return current state."""
        return self.state
