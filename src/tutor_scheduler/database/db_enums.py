'''
Static mirrors of the database ENUM types.
'''
import enum


class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member values."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]


class SessionTypeEnum(ListableEnum):
    INDIVIDUAL = "individual"
    GROUP = "group"
    REGULARS = "regulars"


class InvitationStatusEnum(ListableEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class TimeblockStatusEnum(ListableEnum):
    AVAILABLE = "available"
    BOOKED = "booked"
    CANCELLED = "cancelled"


class OccurrenceStatusEnum(ListableEnum):
    BOOKED = "booked"
    CANCELLED = "cancelled"
