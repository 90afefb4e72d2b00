class ConstantsClass(type):
    """A metaclass for classes that should only contain string constants."""

    def __setattr__(self, name, value):
        raise TypeError("Constants class cannot be modified")

    def get_values(cls):
        """Get all user-defined string values of the class."""
        return [
            value
            for key, value in cls.__dict__.items()
            if not key.startswith("__") and isinstance(value, str)
        ]


class ConfigKeys(metaclass=ConstantsClass):
    """String constants for accessing the config."""

    INPUT = "input"
    FORMAT = "format"
    MODIFICATION_TABLE = "modification_table"
    MASS_OFFSET_TABLE = "mass_offset_table"
    COMPOUND_CLASS_TABLE = "compound_class_table"

    SPECTRUM = "spectrum"
    FRAGMENTATION_MODE = "fragmentation_mode"
    MASS_ANALYZER = "mass_analyzer"
    COLLISION_ENERGY = "collision_energy"
    PRECURSOR_MZ = "precursor_mz"

    FILTER = "filter"
    TOP_N = "top_n"
    INTENSITY_CUTOFF = "intensity_cutoff"
    ION_TYPES = "ion_types"
    OLD_MOD_MASS = "old_mod_mass"
    NEW_MOD_MASS = "new_mod_mass"

    REPORTING = "reporting"
    PROGRESS_INTERVAL = "progress_interval"


class SourceFormats(metaclass=ConstantsClass):
    """Format tags stored as provenance on each spectrum."""

    MSP = "msp"
    SPTXT = "sptxt"
    # recognised but not implemented
    BLIB = "blib"


class PrecursorMzModes(metaclass=ConstantsClass):
    """How the converter obtains the precursor m/z of a spectrum."""

    READ = "read"
    CALCULATE = "calculate"


class HeaderKeys(metaclass=ConstantsClass):
    """Normalized header field names, see `dbkey.reader.base.normalize_key`."""

    NAME = "name"
    COMMENT = "comment"
    NUM_PEAKS = "numpeaks"
    PRECURSOR_MZ = "precursormz"
    MW = "mw"


class CommentKeys(metaclass=ConstantsClass):
    """Keys of the space separated `key=value` tokens in `Comment:` fields."""

    PARENT = "Parent"
    COLLISION_ENERGY = "CollisionEnergy"
    COLLISION_ENERGY_MSP = "Collision_energy"
    RETENTION_TIME = "RetentionTime"
    IRT = "iRT"
    MODS = "Mods"
    MOD_STRING = "ModString"
    FRAGMENTATION = "Fragmentation"
