from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

from jsonschema import Draft202012Validator

from deckforge.engine.types import CardPool, CardTemplate

# Keywords only count at the start of an ability line.
_RESIST_RE = re.compile(r"^\s*Resist\s*\+(\d+)", re.IGNORECASE)
_EVASIVE_RE = re.compile(r"^\s*Evasive\b", re.IGNORECASE)


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.absolute_path])
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _optional_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if v is None:
        return 0
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _str_tuple(raw: object) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(s for s in raw if isinstance(s, str))


def _parse_resist(abilities: Sequence[str]) -> int:
    for line in abilities:
        m = _RESIST_RE.match(line)
        if m:
            return int(m.group(1))
    return 0


def parse_card(raw: Mapping[str, object]) -> CardTemplate:
    """Build a template from one ``cards.json`` record (``Set_Num``, ``Name``, ...).

    Keywords come from explicit ``Evasive``/``Resist`` fields when present,
    otherwise from the ability text.
    """
    abilities = _str_tuple(raw.get("Abilities"))
    evasive = raw.get("Evasive")
    if not isinstance(evasive, bool):
        evasive = any(_EVASIVE_RE.match(a) for a in abilities)
    resist = raw.get("Resist")
    if not isinstance(resist, int):
        resist = _parse_resist(abilities)
    inkable = raw.get("Inkable")
    if not isinstance(inkable, bool):
        raise ContentError("Expected bool for Inkable")
    return CardTemplate(
        set_num=_require_int(raw, "Set_Num"),
        card_num=_require_int(raw, "Card_Num"),
        name=_require_str(raw, "Name"),
        cost=_require_int(raw, "Cost"),
        type=_require_str(raw, "Type"),  # type: ignore[arg-type]  # schema restricts values
        inkable=inkable,
        strength=_optional_int(raw, "Strength"),
        willpower=_optional_int(raw, "Willpower"),
        lore=_optional_int(raw, "Lore"),
        evasive=evasive,
        resist=resist,
        move_cost=_optional_int(raw, "Move_Cost"),
        rarity=str(raw.get("Rarity", "Common")),  # type: ignore[arg-type]
        classifications=_str_tuple(raw.get("Classifications")),
        abilities=abilities,
    )


@dataclass(frozen=True)
class DeckManifest:
    id: str
    name: str
    chapter: int
    description: str
    cards: dict[str, int]  # "<set>-<number>" -> quantity

    @property
    def size(self) -> int:
        return sum(self.cards.values())


@dataclass
class HydrationReport:
    """What happened when a manifest was turned into card templates."""

    deck_id: str
    requested: int = 0
    hydrated: int = 0
    missing: dict[str, int] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.missing

    def summary(self) -> str:
        if self.complete:
            return f"{self.deck_id}: {self.hydrated}/{self.requested} cards"
        missing = ", ".join(f"{k} x{v}" for k, v in sorted(self.missing.items()))
        return f"{self.deck_id}: {self.hydrated}/{self.requested} cards (missing {missing})"


def hydrate_deck(pool: CardPool, manifest: DeckManifest) -> tuple[list[CardTemplate], HydrationReport]:
    """Expand a manifest into templates. Unknown keys are skipped and reported."""
    report = HydrationReport(deck_id=manifest.id)
    deck: list[CardTemplate] = []
    for key, qty in manifest.cards.items():
        report.requested += qty
        template = pool.cards.get(key)
        if template is None:
            report.missing[key] = report.missing.get(key, 0) + qty
            continue
        deck.extend([template] * qty)
        report.hydrated += qty
    return deck, report


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_card_pool(self) -> CardPool:
        cards_path = self._data_dir / "cards.json"
        raw = _load_json(cards_path)
        schema = _load_json(self._schema_dir / "cards.schema.json")
        validate_json(raw, schema, context=str(cards_path))

        if not isinstance(raw, dict):
            raise ContentError("cards.json must be an object")
        raw_cards = raw.get("cards")
        if not isinstance(raw_cards, list):
            raise ContentError("cards.json.cards must be a list")
        return pool_from_records(raw_cards)

    def load_deck_manifests(self) -> dict[str, DeckManifest]:
        path = self._data_dir / "decks.json"
        raw = _load_json(path)
        schema = _load_json(self._schema_dir / "decks.schema.json")
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("decks.json must be an object")
        raw_decks = raw.get("decks")
        if not isinstance(raw_decks, dict):
            raise ContentError("decks.json.decks must be an object")

        out: dict[str, DeckManifest] = {}
        for deck_id, d in raw_decks.items():
            if not isinstance(d, dict):
                continue
            raw_cards = d.get("cards")
            cards: dict[str, int] = {}
            if isinstance(raw_cards, dict):
                for k, v in raw_cards.items():
                    if isinstance(k, str) and isinstance(v, int):
                        cards[k] = v
            out[deck_id] = DeckManifest(
                id=deck_id,
                name=_require_str(d, "name"),
                chapter=_require_int(d, "chapter"),
                description=str(d.get("description", "")),
                cards=cards,
            )
        return out

    def load_deck(self, deck_id: str, pool: CardPool | None = None) -> tuple[list[CardTemplate], HydrationReport]:
        manifests = self.load_deck_manifests()
        manifest = manifests.get(deck_id)
        if manifest is None:
            raise ContentError(f"Unknown deck: {deck_id}")
        return hydrate_deck(pool or self.load_card_pool(), manifest)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_card_pool()
        _ = self.load_deck_manifests()


def pool_from_records(records: Sequence[object]) -> CardPool:
    cards: dict[str, CardTemplate] = {}
    for item in records:
        if not isinstance(item, dict):
            continue
        card = parse_card(item)
        cards[card.key] = card
    return CardPool(cards=cards)
