"""Card resolution: applying drawn cards to players."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from flip7.cards import (
    DECK_SIZE,
    Action,
    ActionCard,
    Card,
    Deck,
    Modifier,
    ModifierCard,
    NumberCard,
)
from flip7.game.decisions import TARGET_PROMPT, DecisionSource, parse_target_index, parse_yes
from flip7.game.events import EventEmitter, EventType
from flip7.player import Player
from flip7.rules import RuleSet
from flip7.strategy.auto import Strategy

logger = logging.getLogger(__name__)

FLIP_THREE_DRAWS = 3


@dataclass(frozen=True)
class ApplyResult:
    """
    Outcome of applying a card.

    alive: the player may keep acting this round
    bonus_event: someone reached seven distinct numbers; the round is over
    """

    alive: bool = True
    bonus_event: bool = False
    bonus_player: Player | None = None


CONTINUE = ApplyResult()

# Picks who receives the actions set aside during a Flip Three
CarrierPolicy = Callable[[Sequence[Player]], Player | None]


def first_active_player(players: Sequence[Player]) -> Player | None:
    """Default carrier: the first active player in seat order."""
    return next((p for p in players if p.active), None)


class Frame:
    """One pending piece of work on the resolution stack."""

    async def advance(
        self,
        resolver: "CardResolver",
        child: ApplyResult | None,
    ) -> "Frame | ApplyResult":
        """
        Do the next step.

        Args:
            resolver: The owning resolver
            child: Result of the frame this one pushed last, if any

        Returns:
            A new frame to push, or this frame's final result
        """
        raise NotImplementedError

    def drop(self, resolver: "CardResolver") -> None:
        """Abandon this frame and whatever it still had to do."""


class ApplyCardFrame(Frame):
    """Apply one card to one player."""

    def __init__(
        self,
        player: Player,
        card: Card,
        context: str,
        discarded: bool = False,
    ) -> None:
        self.player = player
        self.card = card
        self.context = context
        self.discarded = discarded
        self._started = False

    async def advance(self, resolver: "CardResolver", child: ApplyResult | None) -> "Frame | ApplyResult":
        if self._started:
            # Second Chance extra draws and Flip Three sequences report back here
            return child or CONTINUE
        self._started = True
        return await resolver.resolve_card(self.player, self.card, self.context, self.discarded)

    def drop(self, resolver: "CardResolver") -> None:
        if not self.discarded and not self._started:
            resolver.discard(self.card)


class FlipThreeFrame(Frame):
    """
    Three forced draws for one target.

    Action cards drawn here are set aside and resolved once the draws are
    done (or cut short by the target going out).
    """

    def __init__(self, target: Player) -> None:
        self.target = target
        self.drawn = 0
        self.pending: list[ActionCard] = []
        self._stopped = False
        self._resolving = False

    async def advance(self, resolver: "CardResolver", child: ApplyResult | None) -> "Frame | ApplyResult":
        if not self._resolving:
            if child is not None and not child.alive:
                self._stopped = True
            frame = self._next_draw(resolver)
            if frame is not None:
                return frame
            self._resolving = True
        return self._next_deferred(resolver)

    def _next_draw(self, resolver: "CardResolver") -> Frame | None:
        while not self._stopped and self.drawn < FLIP_THREE_DRAWS and self.target.active:
            card = resolver.draw()
            if card is None:
                return None
            self.drawn += 1
            resolver.notify(
                EventType.FLIP_THREE_DRAW,
                f"[FLIP THREE] Draw {self.drawn}/{FLIP_THREE_DRAWS} for {self.target.name}: {card}",
                player=self.target.name,
                card=str(card),
                draw=self.drawn,
            )
            if isinstance(card, ActionCard):
                resolver.discard(card)
                self.pending.append(card)
                resolver.notify(
                    EventType.ACTION_DEFERRED,
                    f"[FLIP THREE] {card} set aside until the draws are done.",
                    card=str(card),
                )
                continue
            return ApplyCardFrame(self.target, card, "flip three")
        return None

    def _next_deferred(self, resolver: "CardResolver") -> "Frame | ApplyResult":
        if not self.pending:
            return CONTINUE

        card = self.pending.pop(0)
        carrier = resolver.deferred_carrier(resolver.players)
        if carrier is None:
            resolver.notify(
                EventType.NO_TARGET,
                f"[PENDING ACTION] Nobody is active to receive {card}; discarded.",
                card=str(card),
                dropped=len(self.pending) + 1,
            )
            self.pending.clear()
            return CONTINUE

        resolver.notify(
            EventType.DEFERRED_ACTION_RESOLVED,
            f"[PENDING ACTION] Resolving {card} after FlipThree with {carrier.name}.",
            card=str(card),
            player=carrier.name,
        )
        return ApplyCardFrame(carrier, card, "flip three pending action", discarded=True)


class CardResolver:
    """
    Applies cards to players.

    Owns the draw pile and the discard pile. Chained effects (the Second
    Chance extra draw, Flip Three and its deferred actions) run on an
    explicit stack. One call starts at most ``max_depth`` effects; past that the
    remaining work is dropped.
    """

    def __init__(
        self,
        players: Sequence[Player],
        deck: Deck,
        io: DecisionSource,
        events: EventEmitter,
        rules: RuleSet | None = None,
        strategies: Mapping[str, Strategy] | None = None,
        deferred_carrier: CarrierPolicy | None = None,
        max_depth: int | None = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            players: Seats in turn order
            deck: Draw pile
            io: Where questions go
            events: Emitter for every state change
            rules: Game rules
            strategies: Automatic players by name; everyone else is asked
            deferred_carrier: Who receives actions set aside by Flip Three
            max_depth: Effects one card may set off; defaults to the size of a full deck
        """
        self.players = list(players)
        self.deck = deck
        self.io = io
        self.events = events
        self.rules = rules or RuleSet()
        self.strategies = dict(strategies or {})
        self.deferred_carrier = deferred_carrier or first_active_player
        self.discard_pile: list[Card] = []
        self.max_depth = max_depth or max(len(deck), DECK_SIZE)

    def notify(self, event_type: EventType, message: str, **data: Any) -> None:
        """Emit an event carrying its human-readable line."""
        self.events.emit_new(event_type, message=message, **data)

    # ------------------------------------------------------------------
    # Draw pile
    # ------------------------------------------------------------------

    def draw(self) -> Card | None:
        """Draw a card, recycling the discard pile when the deck runs dry."""
        card = self.deck.draw()
        if card is not None:
            return card
        if not self.discard_pile:
            return None

        self.notify(
            EventType.DECK_RECYCLED,
            "[DECK] Draw pile empty: shuffling the discard pile.",
            cards=len(self.discard_pile),
        )
        self.deck.recycle(self.discard_pile)
        return self.deck.draw()

    def discard(self, card: Card) -> None:
        self.discard_pile.append(card)

    @property
    def cards_in_play(self) -> int:
        """Cards in the draw and discard piles."""
        return len(self.deck) + len(self.discard_pile)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def apply(self, player: Player, card: Card, context: str = "hit") -> ApplyResult:
        """
        Apply a drawn card and everything it sets off.

        Args:
            player: Player receiving the card
            card: The card
            context: Label for the log ("hit", "initial deal", ...)

        Returns:
            The combined result; a bonus event stops all pending work
        """
        stack: list[Frame] = [ApplyCardFrame(player, card, context)]
        result: ApplyResult | None = None
        started = 1

        while stack:
            outcome = await stack[-1].advance(self, result)
            result = None

            if isinstance(outcome, ApplyResult):
                stack.pop()
                if outcome.bonus_event:
                    return outcome
                result = outcome
            elif started >= self.max_depth:
                self._abandon([outcome, *reversed(stack)])
                return ApplyResult(alive=player.active)
            else:
                stack.append(outcome)
                started += 1

        return result or CONTINUE

    def _abandon(self, frames: list[Frame]) -> None:
        logger.warning("Resolution budget of %d effects reached", self.max_depth)
        for frame in frames:
            frame.drop(self)
        self.notify(
            EventType.RESOLUTION_LIMIT,
            "[RESOLVE] Too many chained effects: the remaining ones are discarded.",
            depth=self.max_depth,
            dropped=len(frames),
        )

    async def resolve_card(
        self,
        player: Player,
        card: Card,
        context: str,
        discarded: bool = False,
    ) -> Frame | ApplyResult:
        """Apply one card's own effect; chained work comes back as a frame."""
        self.notify(
            EventType.CARD_APPLIED,
            f"[CARD] {player.name} receives {card} ({context})",
            player=player.name,
            card=str(card),
            context=context,
        )

        if isinstance(card, NumberCard):
            return await self._apply_number(player, card)
        if isinstance(card, ModifierCard):
            return self._apply_modifier(player, card)

        if not discarded:
            self.discard(card)
        if card.action is Action.FREEZE:
            return await self._freeze(player)
        if card.action is Action.SECOND_CHANCE:
            return self._second_chance(player)
        return await self._flip_three(player)

    async def _apply_number(self, player: Player, card: NumberCard) -> ApplyResult:
        state = player.state

        if card.value in state.numbers:
            if state.has_second_chance and await self._use_second_chance(player, card):
                state.has_second_chance = False
                self.discard(card)
                self.notify(
                    EventType.SECOND_CHANCE_USED,
                    f"[SECOND CHANCE] {player.name} cancels the duplicate {card.value}. Card discarded.",
                    player=player.name,
                    value=card.value,
                )
                return CONTINUE

            state.bust()
            self.discard(card)
            self.notify(
                EventType.PLAYER_BUSTS,
                f"[BUST] {player.name} is out of the round (duplicate {card.value}).",
                player=player.name,
                value=card.value,
            )
            return ApplyResult(alive=False)

        state.numbers.add(card.value)
        self.discard(card)

        if state.distinct_count >= self.rules.flip7_size:
            self.notify(
                EventType.FLIP_SEVEN,
                f"[FLIP 7] {player.name} has {state.distinct_count} distinct numbers!"
                f" +{self.rules.flip7_bonus} and the round ends.",
                player=player.name,
            )
            return ApplyResult(alive=True, bonus_event=True, bonus_player=player)
        return CONTINUE

    def _apply_modifier(self, player: Player, card: ModifierCard) -> ApplyResult:
        if card.modifier is Modifier.DOUBLE:
            player.state.has_doubler = True
        else:
            player.state.bonus += card.amount
        self.discard(card)
        return CONTINUE

    async def _use_second_chance(self, player: Player, card: NumberCard) -> bool:
        strategy = self.strategies.get(player.name)
        if strategy is not None:
            return strategy.use_second_chance(player)
        if not self.rules.confirm_second_chance:
            return True

        answer = await self.io.ask(
            f"{player.name} drew a duplicate ({card.value}). Use Second Chance? (y/n) ",
            player.name,
        )
        return parse_yes(answer)

    async def _freeze(self, actor: Player) -> ApplyResult:
        target = await self.choose_target(actor)
        if target is None:
            self.notify(EventType.NO_TARGET, "[FREEZE] No active player to freeze.", action="freeze")
            return CONTINUE

        target.state.freeze()
        self.notify(
            EventType.PLAYER_FROZEN,
            f"[FREEZE] {target.name} is frozen: out of the round, round score 0.",
            player=target.name,
            by=actor.name,
        )
        return CONTINUE

    def _second_chance(self, player: Player) -> "Frame | ApplyResult":
        if not player.state.has_second_chance:
            player.state.has_second_chance = True
            self.notify(
                EventType.SECOND_CHANCE_GAINED,
                f"[SECOND CHANCE] {player.name} keeps a Second Chance and must draw again.",
                player=player.name,
            )
            extra = self.draw()
            if extra is None:
                return CONTINUE
            return ApplyCardFrame(player, extra, "second chance extra draw")

        recipient = next(
            (p for p in self.players if p is not player and p.active and not p.state.has_second_chance),
            None,
        )
        if recipient is None:
            self.notify(
                EventType.SECOND_CHANCE_DISCARDED,
                "[SECOND CHANCE] Nobody can take it: discarded.",
                player=player.name,
            )
            return CONTINUE

        recipient.state.has_second_chance = True
        self.notify(
            EventType.SECOND_CHANCE_TRANSFERRED,
            f"[SECOND CHANCE] {player.name} already had one: given to {recipient.name}.",
            player=player.name,
            recipient=recipient.name,
        )
        return CONTINUE

    async def _flip_three(self, actor: Player) -> "Frame | ApplyResult":
        target = await self.choose_target(actor)
        if target is None:
            self.notify(EventType.NO_TARGET, "[FLIP THREE] No active player to target.", action="flip_three")
            return CONTINUE

        self.notify(
            EventType.FLIP_THREE_STARTED,
            f"[FLIP THREE] {target.name} must flip {FLIP_THREE_DRAWS} cards.",
            player=target.name,
            by=actor.name,
        )
        return FlipThreeFrame(target)

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------

    async def choose_target(self, actor: Player, active_only: bool = True) -> Player | None:
        """
        Pick the player an action card is aimed at.

        A single candidate is chosen automatically. Otherwise the acting
        player's strategy decides, or the acting player is asked for a
        1-based index until the answer is valid.
        """
        candidates = [p for p in self.players if p.active or not active_only]
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        strategy = self.strategies.get(actor.name)
        if strategy is not None:
            return strategy.choose_target(actor, candidates)

        lines = [f"  {i}) {p.name}" for i, p in enumerate(candidates, start=1)]
        self.notify(
            EventType.TARGET_REQUESTED,
            "\n".join(["Choose a target player:", *lines]),
            player=actor.name,
            candidates=[p.name for p in candidates],
        )
        while True:
            answer = await self.io.ask(TARGET_PROMPT, actor.name)
            index = parse_target_index(answer, len(candidates))
            if index is not None:
                return candidates[index]
            self.notify(
                EventType.INVALID_INPUT,
                "Invalid choice, try again.",
                player=actor.name,
                answer=answer,
            )
