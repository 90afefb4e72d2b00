"""Module containing custom exceptions."""


class CustomError(Exception):
    """Custom dbkey error class."""

    _error_code = ""
    _msg = ""
    _detail_msg = ""
    _user_msg = ""

    @property
    def error_code(self):
        return self._error_code

    @property
    def msg(self):
        return self._msg

    @property
    def detail_msg(self):
        return self._detail_msg

    def __init__(self, msg: str = ""):
        self._user_msg = msg

        super().__init__(self._msg)

    def __str__(self):
        return (
            f"{self._error_code}: {self._msg}\n'{self._user_msg}'\n{self._detail_msg}"
        )


class BusinessError(CustomError):
    """Custom error class for 'business' errors.

    A 'business' error is an error that is caused during processing the input (library files, side tables, ...) and not by a
    malfunction in dbkey.
    """


class UserError(CustomError):
    """Custom error class for 'user' errors.

    A 'user' error is an error that is caused by the incompatible user input (paths, formats, configuration, ...) and not by a
    malfunction in dbkey.
    """


class ParseError(BusinessError):
    """Raise when a library entry or side-table row cannot be parsed.

    Parse errors are fatal for the stream they occur in: readers stop at the first one.
    """

    _error_code = "PARSE_ERROR"

    def __init__(self, msg: str, line_number: int | None = None):
        self.line_number = line_number
        self._msg = msg if line_number is None else f"line {line_number}: {msg}"
        super().__init__(msg)


class SpectrumValidationError(BusinessError):
    """Raise when a spectrum violates one or more structural or numeric rules."""

    _error_code = "INVALID_SPECTRUM"

    _msg = "Spectrum failed validation."

    def __init__(self, violations: list[str], spectrum_name: str = ""):
        self.violations = list(violations)
        self.spectrum_name = spectrum_name
        self._detail_msg = "; ".join(self.violations)
        super().__init__(spectrum_name)


class SinkError(BusinessError):
    """Raise when the sink rejects a validated record. Fatal to the whole run."""

    _error_code = "SINK_ERROR"

    _msg = "Failed to write spectrum to sink."

    def __init__(self, spectrum_name: str, detail_msg: str = ""):
        self._detail_msg = detail_msg
        super().__init__(spectrum_name)


class UnsupportedFormatError(UserError):
    """Raise when a library format is unknown or not implemented."""

    _error_code = "UNSUPPORTED_FORMAT"

    _msg = "Unsupported spectral library format."

    _detail_msg = """Supported formats are 'msp' (NIST/Prosit MSP) and 'sptxt' (SpectraST).
    The format is inferred from the file suffix unless 'input.format' is set in the config."""


class ConfigError(BusinessError):
    """Raise when something is wrong with the provided configuration."""

    _error_code = "CONFIG_ERROR"

    _msg = "Malformed or invalid configuration."
    _key = ""
    _config_name = ""
    _detail_msg = ""

    def __init__(
        self,
        key: str = "",
        value: str = "",
        config_name: str = "",
        detail_msg: str = "",
    ):
        self._key = key
        self._value = value
        self._config_name = config_name
        self._detail_msg = detail_msg


class KeyAddedConfigError(ConfigError):
    """Raise when a key should be added to a config."""

    def __init__(self, key: str, value: str, config_name: str):
        super().__init__(key, value, config_name)
        self._detail_msg = (
            f"Defining new keys is not allowed when updating a config: "
            f"key='{self._key}', value='{self._value}', config_name='{self._config_name}'"
        )


class TypeMismatchConfigError(ConfigError):
    """Raise when the type of a value does not match the default type."""

    def __init__(self, key: str, value: str, config_name: str, extra_msg: str):
        super().__init__(key, value, config_name)
        self._detail_msg = (
            f"Types of values must match default config: "
            f"key='{self._key}', value='{self._value}', config_name='{self._config_name}', types='{extra_msg}'"
        )
