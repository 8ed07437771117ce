"""Module for default modeling assumption constants."""
import railconsist as rc

GRAVITATIONAL_ACCELERATION_MPS2 = 9.80665

# impossibly high force, used as the starting value for running minimums
FORCE_SENTINEL_NEWTONS = 9.999e8

# engines at or below this tractive force are legacy driving trailers / cab-cars
CAB_CAR_FORCE_MAX_NEWTONS = 25000.0

# units at or below this length are legacy EOT placeholders, not real cars
PLACEHOLDER_LENGTH_METERS = 1.1

# see MSTSLocomotive.Initialize(): wheel counts below this are taken as drive axles
DRIVE_WHEEL_LIMIT = 7
# see MSTSWagon.LoadFromWagFile(): wheel counts below this are taken as idle axles
IDLE_WHEEL_LIMIT = 6
DEFAULT_AXLES = 4

# derail force is only estimated for units heavier than this
DERAIL_MASS_MIN_KILOGRAMS = 1000.0
# derail forces at or below this are treated as degenerate
DERAIL_FORCE_MIN_NEWTONS = 1000.0

STEAM_ENGINE_TYPE = "Steam"

# brake system types that do not provide an operative power brake
NON_OPERATIVE_BRAKE_SYSTEMS = (
    "manual_braking",
    "air_piped",
    "vacuum_piped",
)

ENGINE_BLOCK_SEPARATOR = "+"

TRAINSET_DIR = ("Trains", "Trainset")
ENGINE_SUFFIX = ".eng"
WAGON_SUFFIX = ".wag"
RECORD_FORMATS = (".yaml", ".yml", ".json")

DEMO_ROUTE_ROOT = rc.resources_root()
DEMO_CONSISTS_DIR = rc.resources_root() / "consists"
