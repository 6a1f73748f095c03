#!/usr/bin/env python3
"""Import smoke test for the LG webOS TV integration.

Imports every integration module in the order Home Assistant loads them and
checks that every name imported from const.py exists. Run it before copying
the integration into a Home Assistant config directory.

Usage:
    python3 tools/smoke_import.py
"""

import importlib
import re
import sys
from pathlib import Path

repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

PACKAGE = "custom_components.lgwebos_tv"
COMPONENT_DIR = repo_root / "custom_components" / "lgwebos_tv"

# Connection manager core, leaves first
CORE_MODULES = [
    "const",
    "errors",
    "models",
    "decision",
    "probe",
    "multiplexer",
    "session",
    "pointer",
    "storage",
    "supervisor",
    "device",
]

# Home Assistant glue
HA_MODULES = [
    "manager",
    "entity_helpers",
    "services",
    "config_flow",
    "diagnostics",
    "media_player",
    "remote",
    "sensor",
    "binary_sensor",
    "entities",
]


def check_import(module_name: str) -> str | None:
    """Import a module, returning an error description on failure."""
    try:
        importlib.import_module(f"{PACKAGE}.{module_name}")
    except (ImportError, AttributeError, SyntaxError, NameError) as e:
        return f"{type(e).__name__}: {e}"
    return None


def verify_const_exports() -> list[str]:
    """Every NAME imported from .const must be defined in const.py."""
    const_content = (COMPONENT_DIR / "const.py").read_text()
    const_names = set(re.findall(r"^([A-Z_][A-Z0-9_]*)(?::[^=]+)? = ", const_content, re.MULTILINE))

    errors = []
    for py_file in COMPONENT_DIR.rglob("*.py"):
        if "__pycache__" in py_file.parts:
            continue
        imports = re.findall(
            r"from\s+\.+const\s+import\s+\(([^)]+)\)|from\s+\.+const\s+import\s+([^\n]+)",
            py_file.read_text(),
        )
        for block in imports:
            for name in re.findall(r"\b([A-Z][A-Z0-9_]{2,})\b", " ".join(block)):
                if name not in const_names:
                    errors.append(f"{py_file.relative_to(repo_root)}: imports missing constant '{name}'")
    return errors


def main() -> int:
    """Run smoke test."""
    print("=" * 70)
    print("LG webOS TV - Import Smoke Test")
    print("=" * 70)

    const_errors = verify_const_exports()
    if const_errors:
        print("✗ Imports of non-existent constants:")
        for error in const_errors:
            print(f"  - {error}")
        return 1
    print("✓ All constants imported from const.py exist")

    failed = []
    for group, modules in (("core", CORE_MODULES), ("Home Assistant", HA_MODULES)):
        print(f"\nImporting {group} modules...")
        for module in modules:
            error = check_import(module)
            if error:
                print(f"✗ FAIL {module}\n  {error}")
                failed.append(module)
            else:
                print(f"✓ OK {module}")

    print()
    if failed:
        print(f"FAILED: {len(failed)} module(s) failed to import: {', '.join(failed)}")
        return 1
    print("SUCCESS: all modules imported.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
