from . import issue

ENTRY_PARSER = issue
