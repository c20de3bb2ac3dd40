import logging

from sonos import SonosError

from .errors import InconsistentTopology, NoSpeakerDiscovered, TopologyQueryFailed

logger = logging.getLogger(__name__)

GROUP_NAME_SEPARATOR = ' + '


class Group:
    """A set of speakers playing in sync, led by a coordinator."""

    def __init__(self, coordinator, members):
        members = list(members)
        position = next(
            (i for i, member in enumerate(members) if member.uuid == coordinator),
            None,
        )
        if position is None:
            raise InconsistentTopology(
                f"Coordinator {coordinator} of the group was not found in the members of the group"
            )
        # Coordinator first so its name leads the display name
        self.coordinator = coordinator
        self.members = [members.pop(position)] + members

    @property
    def name(self):
        return GROUP_NAME_SEPARATOR.join(member.name for member in self.members)

    def __repr__(self):
        return f"Group({self.name!r}, coordinator={self.coordinator!r})"


class GroupModel:
    """The ordered groups of the system plus which one is selected."""

    def __init__(self, groups, selected=0):
        self.groups = list(groups)
        self.selected = selected if self.groups else 0

    def __len__(self):
        return len(self.groups)

    @property
    def names(self):
        return tuple(group.name for group in self.groups)

    def selected_group(self):
        if not self.groups:
            return None
        return self.groups[self.selected % len(self.groups)]

    def select_next(self):
        if self.groups:
            self.selected = (self.selected + 1) % len(self.groups)

    def select_previous(self):
        if self.groups:
            self.selected = (self.selected - 1) % len(self.groups)


async def load_groups(client, devices):
    """Asks one speaker for the zone topology and builds the group model."""
    if not devices:
        raise NoSpeakerDiscovered("No speaker discovered!")

    # Any member answers for the whole household; take the first by identifier
    uuid = min(devices)
    try:
        topology = await client.group_topology(devices[uuid])
    except SonosError as e:
        raise TopologyQueryFailed(f"Failed to query group topology from {uuid}: {e}") from e

    groups = [Group(coordinator, members) for coordinator, members in topology]
    if not groups:
        raise TopologyQueryFailed(f"{uuid} reported no groups")

    for group in groups:
        if group.coordinator not in devices:
            logger.warning(f"Coordinator {group.coordinator} of {group.name} was not resolved")

    logger.debug(f"Found {len(groups)} groups")
    return GroupModel(groups)
