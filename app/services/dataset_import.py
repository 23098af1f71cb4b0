import json
from pathlib import Path


def parse_csv_dataset(content: str) -> dict[str, dict[str, str]]:
    """
    Parse `category,key,response` lines into {category: {key: response}}.

    A first line mentioning "category" is treated as a header. The response
    is everything after the second comma, so it may contain commas itself.
    Incomplete lines are skipped.
    """
    lines = [line for line in content.splitlines() if line.strip()]
    if lines and "category" in lines[0].lower():
        lines = lines[1:]

    responses: dict[str, dict[str, str]] = {}
    for line in lines:
        parts = line.split(",", 2)
        if len(parts) < 3:
            continue
        category, key, response = (part.strip() for part in parts)
        if not category or not key or not response:
            continue
        responses.setdefault(category.lower(), {})[key.lower()] = response
    return responses


def load_dataset_file(path: Path) -> dict:
    """Read a .csv or .json dataset file into the bulk-import mapping."""
    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("JSON dataset must be an object of {category: {key: response}}")
        return data
    return parse_csv_dataset(content)
