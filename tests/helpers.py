"""Builders for raw snapshot records used across the test suite."""


def node(node_id: int, size: int = 0, type: str = "Object", **extra: object) -> dict:
    return {"id": node_id, "type": type, "size": size, **extra}


def edge(source: int, target: int, type: str = "property", name: str | None = None) -> dict:
    record: dict = {"from": source, "to": target, "type": type}
    if name is not None:
        record["name"] = name
    return record
