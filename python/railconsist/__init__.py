from importlib.metadata import version

__version__ = version("railconsist")

from pathlib import Path


def package_root() -> Path:
    """
    Returns the package root directory.
    """
    path = Path(__file__).parent
    return path


def resources_root() -> Path:
    """
    Returns the resources root directory.
    """
    path = package_root() / "resources"
    return path


from railconsist import defaults  # noqa: E402
from railconsist import utilities as utils  # noqa: E402, F401
from railconsist.serde import SerdeAPI, MalformedDefinition  # noqa: E402, F401
from railconsist.records import (  # noqa: E402, F401
    MembershipEntry,
    EngineParams,
    PhysicalRecord,
    NotFound,
)
from railconsist.cars import Car, Direction, make_car  # noqa: E402, F401
from railconsist.classifier import (  # noqa: E402, F401
    ClassifierConfig,
    UnitClassifier,
    UnitContribution,
)
from railconsist.resolvers import (  # noqa: E402, F401
    RecordResolver,
    DictResolver,
    TrainsetResolver,
    CachedResolver,
)
from railconsist.consist import Consist, ConsistBuilder  # noqa: E402, F401
from railconsist.definitions import ConsistDefinition, load_definitions  # noqa: E402, F401
from railconsist.reports import build_consists, summarize_consists  # noqa: E402, F401
from railconsist.utilities import set_log_level  # noqa: E402, F401
