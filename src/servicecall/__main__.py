"""servicecall main entry point."""

import logging
import sys

from servicecall.logging_setup import configure_logging
from servicecall.models.operation import ServiceModel
from servicecall.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Print the version and, optionally, a summary of a model file.

    Args:
        argv: Arguments after the program name. Defaults to sys.argv[1:].

    Returns:
        Exit code (0 for success, 1 if the model could not be loaded).
    """
    args = sys.argv[1:] if argv is None else argv
    configure_logging()

    print(f"servicecall {__version__}")
    if not args:
        return 0

    try:
        model = ServiceModel.from_file(args[0])
    except (OSError, ValueError) as e:
        logger.error(f"Unable to load model {args[0]}: {e}")
        return 1

    print(f"{model.service_name}: {len(model.operations)} operation(s)")
    for name, operation in sorted(model.operations.items()):
        extras = []
        if operation.pagination is not None and operation.pagination.is_paginable:
            extras.append("paginated")
        if operation.waiters:
            extras.append(f"waiters: {', '.join(sorted(operation.waiters))}")
        suffix = f" ({'; '.join(extras)})" if extras else ""
        print(f"  {name}{suffix}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
