# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They describe the fixed geometry of the test chamber and buckets, the
particle sizes, and the empirically tuned constants of the overlap
relaxation. Anything a user might want to experiment with lives in
config.json instead.
"""

# --- Test Chamber Geometry ---
# Size of the chamber in model units (picometers). The chamber is centred
# on the origin.
CHAMBER_WIDTH = 450
CHAMBER_HEIGHT = 280
# Gap kept between an isotope's edge and the chamber wall so that its
# outline never touches the wall.
CHAMBER_WALL_BUFFER = 1

# --- Isotope Sizes ---
# Large atoms are used with buckets, small atoms when many are shown at once.
LARGE_ISOTOPE_RADIUS = 10
SMALL_ISOTOPE_RADIUS = 4

# --- Overlap Relaxation ---
# These only have to "look right" and changing them changes how the atoms
# settle, not just how fast.
MAX_OVERLAP_ADJUST_POPULATION = 100
MAX_OVERLAP_ITERATIONS = 10000
INTER_PARTICLE_FORCE_CONST = 200.0
WALL_FORCE_CONST = INTER_PARTICLE_FORCE_CONST * 10
MIN_INTER_PARTICLE_DISTANCE = 5.0

# --- Mixture Defaults ---
DEFAULT_PROTON_COUNT = 1  # Hydrogen
NUM_LARGE_ISOTOPES_PER_BUCKET = 10
NUM_NATURES_MIX_ATOMS = 1000
NUMERICAL_CONTROL_CAPACITY = 100
# Decimal places used when reading natural abundances.
NATURAL_ABUNDANCE_DIGITS = 5
ABUNDANCE_SORT_DIGITS = 10

# --- Controller Layout ---
BUCKET_WIDTH = 120
BUCKET_HEIGHT = 50
CONTROLLER_Y_OFFSET_BUCKET = -250
CONTROLLER_Y_OFFSET_SLIDER = -238
# Four or more controllers do not fit under the chamber and are spread a
# little wider, starting from this x position.
WIDE_CONTROLLER_X_OFFSET = -180
WIDE_CONTROLLER_SPREAD = 1.10
