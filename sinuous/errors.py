class SinuousError(Exception):
    """Base class for engine failures."""


class NoDevicesFound(SinuousError):
    """No speaker could be resolved at startup."""


class NoSpeakerDiscovered(SinuousError):
    """There is no speaker to ask for the group topology."""


class TopologyQueryFailed(SinuousError):
    """The group topology could not be fetched or was empty."""


class InconsistentTopology(TopologyQueryFailed):
    """A group's coordinator is missing from its own member list."""


class NoSelectedGroup(SinuousError):
    """A command needs a coordinator but no group is selected."""


class CoordinatorNotResolved(NoSelectedGroup):
    """The selected group's coordinator is not among the resolved devices."""


class CommandFailed(SinuousError):
    """A device call made on behalf of a command failed."""


class RefreshFailed(SinuousError):
    """Polling the selected coordinator failed."""


class FavoritesFetchFailed(SinuousError):
    """The favorites catalog could not be fetched."""


class ChannelClosed(SinuousError):
    """The other end of a channel has gone away."""
