from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Node
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class Node:
    """
    Attributes:
        id    : Unique integer identifier within a graph.
        label : Human-readable name.  Purely cosmetic, never used for ordering.
    """

    id:    int
    label: str = ""

    @property
    def display(self) -> str:
        return self.label or str(self.id)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label}

    @classmethod
    def from_dict(cls, data: dict) -> "Node":
        return cls(id=int(data["id"]), label=str(data.get("label", "")))

    def __repr__(self) -> str:
        return f"Node(id={self.id}, label={self.label})"
