import secrets

from slugify import slugify


def random_suffix(length: int = 6) -> str:
    return secrets.token_hex((length + 1) // 2)[:length].upper()


async def generate_prefixed_id(model, prefix: str, field: str = "id", suffix_length: int = 6, attempts: int = 10) -> str:
    """``PRV3FA9C1``-style ids: a role prefix plus a random hex suffix, unique in ``model.field``."""
    head = slugify(prefix, separator="").upper()

    for _ in range(attempts):
        candidate = f"{head}{random_suffix(suffix_length)}"
        if not await model.filter(**{field: candidate}).exists():
            return candidate

    raise RuntimeError(f"No free {model.__name__}.{field} for prefix {head!r} after {attempts} attempts")
