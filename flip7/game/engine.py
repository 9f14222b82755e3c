"""Flip 7 game engine with state machine."""

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Any, Mapping, Sequence

from transitions import Machine

from flip7.cards import Deck
from flip7.game.decisions import DecisionSource, TurnChoice, parse_turn_choice, turn_prompt
from flip7.game.events import EventEmitter, EventType, GameEvent
from flip7.game.resolution import CONTINUE, ApplyResult, CardResolver, CarrierPolicy
from flip7.game.state import RoundPhase
from flip7.player import Player
from flip7.rules import RuleSet
from flip7.statistics.advice import Advice, compute_advice
from flip7.strategy.auto import Strategy

logger = logging.getLogger(__name__)


@dataclass
class Round:
    """One play cycle from the deal to scoring."""

    number: int
    dealer_index: int
    ended_by_bonus: bool = False
    bonus_player: Player | None = None
    scores: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class GameResult:
    """Final standings. Equal top totals share the victory."""

    winners: tuple[Player, ...]
    ranking: tuple[Player, ...]
    rounds: int

    @property
    def is_shared(self) -> bool:
        return len(self.winners) > 1

    @property
    def winner(self) -> Player | None:
        """The sole winner, or None on a shared victory."""
        return self.winners[0] if len(self.winners) == 1 else None


class Flip7Game:
    """
    Flip 7 game engine using a state machine.

    The engine is UI-agnostic: questions go through the injected
    DecisionSource, everything that happens is emitted as a GameEvent and
    its text forwarded to ``io.log``.
    """

    # State machine states
    STATES = [s.name.lower() for s in RoundPhase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_round", "source": "waiting", "dest": "dealing"},
        {"trigger": "open_turns", "source": "dealing", "dest": "active_loop"},
        {"trigger": "end_round", "source": ["dealing", "active_loop"], "dest": "scoring"},
        {"trigger": "finish_scoring", "source": "scoring", "dest": "dealer_advance"},
        {"trigger": "await_next_round", "source": "dealer_advance", "dest": "waiting"},
        {"trigger": "conclude", "source": "dealer_advance", "dest": "game_over"},
    ]

    def __init__(
        self,
        player_names: Sequence[str],
        io: DecisionSource,
        rules: RuleSet | None = None,
        strategies: Mapping[str, Strategy] | None = None,
        deck: Deck | None = None,
        rng: Random | None = None,
        deferred_carrier: CarrierPolicy | None = None,
    ) -> None:
        """
        Initialize a new game.

        Args:
            player_names: Seats in turn order (unique, non-empty)
            io: Decision source for prompts and log lines
            rules: Game rules (uses defaults if not provided)
            strategies: Automatic players by name
            deck: Draw pile to use as is; a shuffled standard deck otherwise
            rng: Random number generator for reproducible games
            deferred_carrier: Who receives actions set aside by Flip Three
        """
        names = [name.strip() for name in player_names]
        if not names:
            raise ValueError("A game needs at least one player")
        if any(not name for name in names):
            raise ValueError("Player names cannot be empty")
        if len(set(names)) != len(names):
            raise ValueError("Player names must be unique")

        self.rules = rules or RuleSet()
        self.io = io
        self.players = [Player(name) for name in names]
        self.strategies = dict(strategies or {})
        unknown = set(self.strategies) - set(names)
        if unknown:
            raise ValueError(f"Strategies given for unknown players: {sorted(unknown)}")

        if deck is None:
            deck = Deck(rng=rng)
            deck.shuffle()

        self.events = EventEmitter()
        self.events.subscribe(self._forward_to_io)
        self.resolver = CardResolver(
            self.players,
            deck,
            io,
            self.events,
            rules=self.rules,
            strategies=self.strategies,
            deferred_carrier=deferred_carrier,
        )

        self.dealer_index = 0
        self.rounds: list[Round] = []
        self.current_round: Round | None = None

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="waiting",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> RoundPhase:
        """Get current phase as enum."""
        return RoundPhase[self._machine_state.upper()]  # type: ignore

    @property
    def deck(self) -> Deck:
        return self.resolver.deck

    @property
    def is_over(self) -> bool:
        """True once any total reaches the victory threshold."""
        return any(p.total_score >= self.rules.victory_threshold for p in self.players)

    def subscribe(self, handler, event_type: EventType | None = None) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def player(self, name: str) -> Player:
        """Look up a seat by name."""
        for p in self.players:
            if p.name == name:
                return p
        raise KeyError(name)

    def advise(self, player: Player) -> Advice:
        """One-step hit/stay advice for a player against the live deck."""
        return compute_advice(player.state, self.resolver.deck, self.rules)

    def _notify(self, event_type: EventType, message: str, **data: Any) -> None:
        self.events.emit_new(event_type, message=message, **data)

    def _forward_to_io(self, event: GameEvent) -> None:
        if event.message:
            self.io.log(event.message)

    def _seating(self) -> list[Player]:
        """Turn order for the current round."""
        if not self.rules.turn_order_follows_dealer:
            return list(self.players)
        start = (self.dealer_index + 1) % len(self.players)
        return self.players[start:] + self.players[:start]

    # ------------------------------------------------------------------
    # Game loop
    # ------------------------------------------------------------------

    async def play(self, max_rounds: int | None = None) -> GameResult:
        """
        Play rounds until someone reaches the victory threshold.

        Args:
            max_rounds: Stop early after this many rounds

        Returns:
            Final standings
        """
        self._notify(
            EventType.GAME_STARTED,
            f"[GAME] Flip 7 starts. Players: {', '.join(p.name for p in self.players)}",
            players=[p.name for p in self.players],
        )
        automatic = [f"{name} ({s.name})" for name, s in self.strategies.items()]
        if automatic:
            logger.info("Automatic players: %s", ", ".join(automatic))

        while self.state is not RoundPhase.GAME_OVER:
            if max_rounds is not None and len(self.rounds) >= max_rounds:
                break
            await self.play_round()

        return self._finish()

    async def play_round(self) -> Round:
        """Deal, run the hit/stay loop, score and rotate the dealer."""
        self.begin_round()
        current = Round(number=len(self.rounds) + 1, dealer_index=self.dealer_index)
        self.current_round = current
        self.rounds.append(current)

        for p in self.players:
            p.state.reset()

        self._notify(
            EventType.ROUND_STARTED,
            f"[ROUND {current.number}] Round starts. Dealer = {self.players[self.dealer_index].name}."
            " Initial deal: one card per player.",
            round=current.number,
            dealer=self.players[self.dealer_index].name,
        )

        result = await self._initial_deal()
        if not result.bonus_event:
            self.open_turns()
            result = await self._turn_loop()
        if result.bonus_event:
            current.ended_by_bonus = True
            current.bonus_player = result.bonus_player
        self.end_round()

        self._score_round(current)
        self.finish_scoring()

        self._advance_dealer()
        if self.is_over:
            self.conclude()
        else:
            self.await_next_round()
        return current

    async def _initial_deal(self) -> ApplyResult:
        for p in self._seating():
            if not p.active:
                continue
            card = self.resolver.draw()
            if card is None:
                continue
            result = await self.resolver.apply(p, card, "initial deal")
            if result.bonus_event:
                return result
        return CONTINUE

    async def _turn_loop(self) -> ApplyResult:
        while True:
            active = [p for p in self._seating() if p.active]
            if not active:
                return CONTINUE

            for p in active:
                if not p.active:
                    continue

                self._notify(
                    EventType.PLAYER_TURN,
                    f"[TURN] {p.status_line()}",
                    player=p.name,
                )

                if not await self._wants_hit(p):
                    p.state.active = False
                    self._notify(
                        EventType.PLAYER_STAY,
                        f"[STAY] {p.name} stays and will not draw again this round.",
                        player=p.name,
                    )
                    continue

                card = self.resolver.draw()
                if card is None:
                    p.state.active = False
                    self._notify(
                        EventType.DECK_EXHAUSTED,
                        f"[DECK] No cards left. {p.name} is done for this round.",
                        player=p.name,
                    )
                    continue

                self._notify(EventType.PLAYER_HIT, f"[HIT] {p.name} draws a card.", player=p.name)
                result = await self.resolver.apply(p, card, "hit")
                if result.bonus_event:
                    return result

    async def _wants_hit(self, player: Player) -> bool:
        strategy = self.strategies.get(player.name)
        if strategy is not None:
            hit = strategy.wants_hit(player, self.resolver.deck, self.rules)
            self._notify(
                EventType.AUTO_DECISION,
                f"[AUTO] {player.name} ({strategy.name}) holds {player.state.distinct_count}"
                f" numbers => {'HIT' if hit else 'STAY'}",
                player=player.name,
                hit=hit,
            )
            return hit

        while True:
            answer = await self.io.ask(turn_prompt(player.name), player.name)
            choice = parse_turn_choice(answer)

            if choice is TurnChoice.ADVICE:
                advice = self.advise(player)
                self._notify(
                    EventType.ADVICE_GIVEN,
                    advice.summary(),
                    player=player.name,
                    suggestion=advice.suggestion.name,
                )
                continue
            if choice is None:
                self._notify(
                    EventType.INVALID_INPUT,
                    "Invalid choice: type h (hit), s (stay) or a (advice).",
                    player=player.name,
                    answer=answer,
                )
                continue
            return choice is TurnChoice.HIT

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _score_round(self, current: Round) -> None:
        for p in self.players:
            triggered = current.bonus_player is p
            score = p.state.round_score(bonus_event=triggered, flip7_bonus=self.rules.flip7_bonus)
            p.total_score += score
            current.scores[p.name] = score
            self._notify(
                EventType.PLAYER_SCORED,
                f"[SCORE] {p.name}: round={score} | total={p.total_score}"
                f" | eliminated={p.state.eliminated} | {p.state}",
                player=p.name,
                score=score,
                total=p.total_score,
                flip7=triggered,
            )
            # Unused second chances are lost at the end of the round
            p.state.has_second_chance = False

        ending = " by Flip 7" if current.ended_by_bonus else ""
        self._notify(
            EventType.ROUND_ENDED,
            f"[ROUND {current.number}] Round over{ending}.",
            round=current.number,
            scores=dict(current.scores),
            bonus_player=current.bonus_player.name if current.bonus_player else None,
        )

    def _advance_dealer(self) -> None:
        self.dealer_index = (self.dealer_index + 1) % len(self.players)
        self._notify(
            EventType.DEALER_ADVANCED,
            f"[DEALER] Next dealer: {self.players[self.dealer_index].name}",
            dealer=self.players[self.dealer_index].name,
        )

    def _finish(self) -> GameResult:
        ranking = tuple(sorted(self.players, key=lambda p: p.total_score, reverse=True))
        top = ranking[0].total_score
        winners = tuple(p for p in ranking if p.total_score == top)

        lines = []
        if self.is_over:
            lines.append(f"[GAME] Game over: a player reached {self.rules.victory_threshold}+.")
        else:
            lines.append(f"[GAME] Game stopped after {len(self.rounds)} rounds.")
        if len(winners) == 1:
            lines.append(f"[WINNER] {winners[0].name} with {top} points.")
        else:
            lines.append(f"[WINNERS] Shared victory: {', '.join(p.name for p in winners)} with {top} points.")
        lines.append("[RANKING] Final standings:")
        lines.extend(f"  {i}) {p.name} - {p.total_score}" for i, p in enumerate(ranking, start=1))

        self._notify(
            EventType.GAME_ENDED,
            "\n".join(lines),
            winners=[p.name for p in winners],
            ranking=[(p.name, p.total_score) for p in ranking],
        )
        return GameResult(winners=winners, ranking=ranking, rounds=len(self.rounds))
