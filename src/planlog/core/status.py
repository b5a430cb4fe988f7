from .model import Status

CYCLE = (Status.TODO, Status.DOING, Status.DONE)


def cycle(status: Status) -> Status:
    """TODO -> DOING -> DONE -> TODO."""
    idx = CYCLE.index(Status(status))
    return CYCLE[(idx + 1) % len(CYCLE)]
