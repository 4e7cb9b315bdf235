"""Loads the bundled schemas through the package registry and lists them."""

from firestore_once.validation.validator import get_schema_registry


def validate() -> list[str]:
    # The registry meta-validates each schema as it loads.
    names = get_schema_registry().names
    for name in names:
        print(f"ok {name}")
    return names


if __name__ == "__main__":
    validate()
