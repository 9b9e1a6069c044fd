"""Queue access roles."""

from enum import Enum

_VERBS = "crd"


class Role(str, Enum):
    """Verbs a queue client may perform: c(reate/send), r(ead), d(elete).

    Any ordering of the verbs is accepted, so ``Role("dr")`` is ``Role.CONSUMER``.
    """

    EMPTY = ""
    CREATE = "c"
    READ = "r"
    DELETE = "d"
    ADMIN = "crd"
    PRODUCER = "cr"
    CONSUMER = "rd"
    CREATE_DELETE = "cd"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str) or set(value) - set(_VERBS):
            return None
        canonical = "".join(verb for verb in _VERBS if verb in value)
        return cls._value2member_map_.get(canonical)

    def allows(self, required: "Role") -> bool:
        """Return True if every verb in `required` is granted by this role."""
        return all(verb in self.value for verb in required.value)
