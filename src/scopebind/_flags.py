from enum import IntFlag


class InjectFlags(IntFlag):
    DEFAULT = 0
    # return None instead of raising when nothing is found
    OPTIONAL = 1 << 0
    # start the search at the parent injector
    SKIP_SELF = 1 << 1
    # never look past this injector
    SELF = 1 << 2
    # neither read nor populate the caches
    SKIP_CACHE = 1 << 3
