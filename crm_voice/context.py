"""
Session context tracker.

Single source of truth for where the user is in the CRM and which records
they have recently touched. The parser reads it to resolve pronouns; the
host and dispatcher side-effect layer are the only writers.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional

from crm_voice.config import Config


MAX_RECENT_ENTITIES = 10

# Entity types a plural pronoun ("them", "they") can refer to
PERSON_ENTITY_TYPES = frozenset({"contact", "lead", "member"})


class CrmModule(str, Enum):
    CRM = "crm"
    LEADS = "leads"
    CONTACTS = "contacts"
    DEALS = "deals"
    MEMBERS = "members"
    ADVISORS = "advisors"
    ENROLLMENTS = "enrollments"


@dataclass(frozen=True)
class Entity:
    """A CRM record the user has interacted with."""

    type: str       # "contact", "lead", "deal", "member", ...
    id: str
    name: str


@dataclass
class SessionContext:
    """Per-session state used for pronoun and entity resolution."""

    current_page: str = "/crm"
    current_module: CrmModule = CrmModule.CRM
    selected_record: Optional[Entity] = None
    recent_entities: list[Entity] = field(default_factory=list)   # most recent first
    timezone: str = "UTC"

    def __post_init__(self):
        self.current_module = CrmModule(self.current_module)

    @classmethod
    def from_config(cls, config: Config) -> "SessionContext":
        return cls(
            current_page=config.get("context.current_page", "/crm"),
            current_module=config.get("context.current_module", "crm"),
            timezone=config.get("context.timezone", "UTC"),
        )

    def add_recent_entity(self, entity: Entity) -> None:
        """Insert at the front; an id already present moves to the front."""
        others = [e for e in self.recent_entities if e.id != entity.id]
        self.recent_entities = [entity, *others][:MAX_RECENT_ENTITIES]

    def recent_person(self) -> Optional[Entity]:
        """Most recent contact, lead or member, if any."""
        for entity in self.recent_entities:
            if entity.type in PERSON_ENTITY_TYPES:
                return entity
        return None

    def update(self, **changes) -> None:
        """Apply partial updates (current_page, selected_record, ...)."""
        known = {f.name for f in fields(self)}
        for key, value in changes.items():
            if key not in known:
                raise AttributeError(f"SessionContext has no field {key!r}")
            if key == "current_module":
                value = CrmModule(value)
            if key == "recent_entities":
                seen, deduped = set(), []
                for entity in value:
                    if entity.id not in seen:
                        seen.add(entity.id)
                        deduped.append(entity)
                value = deduped[:MAX_RECENT_ENTITIES]
            setattr(self, key, value)
