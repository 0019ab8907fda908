import re
from pathlib import Path

CANONICAL_MODULES = {
    "wholesale/services/inventory_buckets.py",
}


def test_no_direct_quantity_mutations_outside_bucket_manager():
    root = Path(__file__).resolve().parents[1]
    pattern = re.compile(r"\.quantity\s*(=|[+\-]=)(?!=)")
    violations = []

    for path in (root / "wholesale").rglob("*.py"):
        rel_path = path.relative_to(root).as_posix()
        if rel_path in CANONICAL_MODULES:
            continue
        text = path.read_text(encoding="utf-8")
        for match in pattern.finditer(text):
            line_start = text.rfind("\n", 0, match.start()) + 1
            line_end = text.find("\n", match.start())
            violations.append(f"{rel_path}: {text[line_start:line_end].strip()}")

    assert not violations, (
        "Bucket stock must only change through "
        "wholesale.services.inventory_buckets.adjust_quantity:\n- " + "\n- ".join(violations)
    )
