"""Validation rules and user-facing messages."""

FOOD_NAME_MAX_LENGTH = 100
TAG_NAME_MAX_LENGTH = 50
MAX_TAGS_PER_FOOD = 10
MAX_TOTAL_TAGS = 100
MAX_TOTAL_FOODS = 1000

DEFAULT_IMAGE_FORMATS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})
DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024

FOOD_NAME_REQUIRED = "Please enter food name"
FOOD_NAME_TOO_LONG = "Food name is too long (max 100 characters)"
TAG_NAME_REQUIRED = "Please enter tag name"
TAG_NAME_TOO_LONG = "Tag name is too long (max 50 characters)"
CATEGORY_NAME_REQUIRED = "Please enter category name"
SUBGROUP_NAME_REQUIRED = "Please enter subgroup name"
MAX_TAGS_PER_FOOD_REACHED = "Maximum 10 tags per food item"
MAX_FOODS_REACHED = "Maximum number of foods reached (1000)"
MAX_TAGS_REACHED = "Maximum number of tags reached (100)"
INVALID_IMAGE_FORMAT = "Unsupported image format. Please use JPG, PNG, GIF, or WebP"
IMAGE_TOO_LARGE = "Image file is too large (max 5MB)"


def food_name_errors(name: str) -> list[str]:
    """Return violations for a food name."""
    cleaned = name.strip()
    if not cleaned:
        return [FOOD_NAME_REQUIRED]
    if len(cleaned) > FOOD_NAME_MAX_LENGTH:
        return [FOOD_NAME_TOO_LONG]
    return []


def tag_name_errors(name: str) -> list[str]:
    """Return violations for a tag name."""
    cleaned = name.strip()
    if not cleaned:
        return [TAG_NAME_REQUIRED]
    if len(cleaned) > TAG_NAME_MAX_LENGTH:
        return [TAG_NAME_TOO_LONG]
    return []


def tag_ids_errors(tag_ids: list[int], known_ids: set[int]) -> list[str]:
    """Return violations for a deduplicated list of tag ids."""
    errors: list[str] = []
    if len(tag_ids) > MAX_TAGS_PER_FOOD:
        errors.append(MAX_TAGS_PER_FOOD_REACHED)
    errors.extend(
        f"Unknown tag id: {tag_id}" for tag_id in tag_ids if tag_id not in known_ids
    )
    return errors


def unique_tag_ids(tag_ids: object) -> list[int]:
    """Collapse duplicate tag ids while keeping first-seen order."""
    seen: dict[int, None] = {}
    if isinstance(tag_ids, list | tuple | set | frozenset):
        for value in tag_ids:
            seen.setdefault(int(value), None)
    return list(seen)


def image_errors(
    filename: str,
    size: int,
    formats: frozenset[str] = DEFAULT_IMAGE_FORMATS,
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES,
) -> list[str]:
    """Return violations for an uploaded image."""
    errors: list[str] = []
    extension = image_extension(filename)
    if extension not in formats:
        errors.append(INVALID_IMAGE_FORMAT)
    if size > max_bytes:
        errors.append(IMAGE_TOO_LARGE)
    return errors


def image_extension(filename: str) -> str:
    """Return the lowercased extension of a file name, without the dot."""
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()
