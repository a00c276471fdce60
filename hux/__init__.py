from . import term, scenario
