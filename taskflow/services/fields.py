"""Field normalization shared by the mutation services."""
from taskflow.errors import ValidationError


def clean_title(value: str, max_length: int = 100) -> str:
    title = (value or "").strip()
    if not title:
        raise ValidationError("Title cannot be empty")
    if len(title) > max_length:
        raise ValidationError(f"Title must be at most {max_length} characters")
    return title


def present_fields(update) -> dict:
    """Fields the caller actually supplied; ``None`` never overwrites a stored value."""
    return {
        field: value
        for field, value in update.model_dump(exclude_unset=True).items()
        if value is not None
    }
