"""JSON input and output for the scheduling engine."""

from shiftcover.io.json_io import (
    GeneratorPayload,
    input_from_dict,
    load_generator_input,
    option_to_dict,
    options_to_json,
)

__all__ = [
    "GeneratorPayload",
    "input_from_dict",
    "load_generator_input",
    "option_to_dict",
    "options_to_json",
]
