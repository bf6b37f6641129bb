def truncate(text: str, max_length: int) -> str:
    return text[:max_length]


class Entry:
    def __init__(
        self,
        *,
        id: int,
        name: str,
        body: str,
    ) -> None:
        self.id = id
        self.name = name
        self.body = body

    @classmethod
    def bounded(
        cls,
        *,
        id: int,
        name: str,
        body: str,
        name_max_length: int,
        body_max_length: int,
    ) -> "Entry":
        """Build an entry with both fields silently cut to their limits."""
        return cls(
            id=id,
            name=truncate(name, name_max_length),
            body=truncate(body, body_max_length),
        )

    def __repr__(self) -> str:
        return f"<Entry(id={self.id}, name={self.name})>"
