"""
Route template normalisation.

Two placeholder syntaxes are accepted in path segments:

    /todos/:id        (colon-prefixed)
    /todos/{id}       (brace-delimited, canonical)

Example:
    transform_route("/todos/:id/foo") -> "/todos/{id}/foo"
    extract_params("/foo/{id}/bar/{baz}/") -> ["id", "baz"]
"""

from typing import List


def transform_route(path: str) -> str:
    """Rewrite colon-prefixed segments into brace-delimited form."""
    segments = []
    for segment in path.split("/"):
        if segment.startswith(":"):
            segments.append(f"{{{segment[1:]}}}")
        else:
            segments.append(segment)
    return "/".join(segments)


def extract_params(path: str) -> List[str]:
    """
    Placeholder names of a canonical path, left to right.

    Names are neither validated nor deduplicated.
    """
    names = []
    for segment in path.split("/"):
        if segment.startswith("{") and segment.endswith("}"):
            names.append(segment[1:-1])
    return names


def is_param(segment: str) -> bool:
    """Check if a canonical segment is a placeholder."""
    return segment.startswith("{") and segment.endswith("}")


def route_specificity(path: str) -> int:
    """
    Specificity score of a canonical path.

    Static segments > placeholders, so ``/todos/filter`` sorts before
    ``/todos/{id}``.
    """
    score = 0
    for segment in path.strip("/").split("/"):
        if not segment:
            continue
        score += 25 if is_param(segment) else 100
    return score
