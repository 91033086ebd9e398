"""Manual link storage: human overrides for fuzzy address matching."""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
import json

import structlog

from addrmatch.normalize import normalize_address


@dataclass
class ManualLink:
    """A human-chosen link from an address to a job or customer."""

    entity: str  # "job" or "customer"
    address: str  # normalized query address
    candidate_id: str
    created_at: str  # ISO timestamp
    notes: str = ""

    @classmethod
    def from_record(cls, record: dict) -> "ManualLink":
        return cls(
            entity=record["entity"],
            address=record["address"],
            candidate_id=str(record["candidate_id"]),
            created_at=record["created_at"],
            notes=record.get("notes", ""),
        )


@dataclass
class ManualLinkStore:
    """Persistent storage for manual links, one JSON file."""

    path: Path
    links: list[ManualLink] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.log = structlog.get_logger()
        if isinstance(self.path, str):
            self.path = Path(self.path)

    def load(self) -> None:
        """Read the links file; a missing or unreadable file leaves the store empty."""
        self.links = []
        if not self.path.exists():
            self.log.info("manual_links_file_not_found", path=str(self.path))
            return

        try:
            records = json.loads(self.path.read_text()).get("links", [])
            self.links = [ManualLink.from_record(r) for r in records]
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            self.log.error("manual_links_load_error", path=str(self.path), error=str(e))
            return
        self.log.info("manual_links_loaded", count=len(self.links))

    def save(self) -> None:
        """Write every link back to the JSON file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"links": [asdict(m) for m in self.links]}
        self.path.write_text(json.dumps(payload, indent=2))
        self.log.info("manual_links_saved", path=str(self.path), count=len(self.links))

    def add_link(self, entity: str, address: str, candidate_id: str, notes: str = "") -> ManualLink:
        """Link *address* to *candidate_id*, replacing any earlier link for it."""
        key = normalize_address(address)
        self.links = [m for m in self.links if not (m.entity == entity and m.address == key)]
        link = ManualLink(
            entity=entity,
            address=key,
            candidate_id=str(candidate_id),
            created_at=datetime.now(timezone.utc).isoformat(),
            notes=notes,
        )
        self.links.append(link)
        self.save()
        self.log.info(
            "manual_link_added",
            entity=entity,
            address=key,
            candidate_id=link.candidate_id,
        )
        return link

    def remove_link(self, index: int) -> bool:
        """Remove a manual link by index."""
        if 0 <= index < len(self.links):
            removed = self.links.pop(index)
            self.save()
            self.log.info(
                "manual_link_removed",
                index=index,
                entity=removed.entity,
                address=removed.address,
            )
            return True
        return False

    def get_all(self) -> list[ManualLink]:
        return self.links

    def lookup(self, entity: str, address: str | None) -> str | None:
        """Return the linked candidate id for *address*, if one was recorded."""
        key = normalize_address(address)
        if not key:
            return None
        for link in reversed(self.links):
            if link.entity == entity and link.address == key:
                return link.candidate_id
        return None
