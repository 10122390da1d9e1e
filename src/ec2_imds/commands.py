"""Address families and the fixed table of metadata commands."""

from __future__ import annotations

from enum import Enum, unique
from typing import Union


class IPVersion(Enum):
    IPV4 = "169.254.169.254"
    IPV6 = "[fd00:ec2::254]"

    @property
    def host(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union["IPVersion", str]) -> "IPVersion":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(
                f"Unsupported IP version '{value}'; expected one of: ipv4, ipv6"
            ) from None


@unique
class IMDSCommand(Enum):
    """Metadata categories, each bound to its path under the service root.

    ``@unique`` turns two commands sharing a path into an import error.
    """

    LIST_VERSIONS = ""
    LIST_OPERATIONS = "meta-data"
    API_TOKEN = "api/token"
    # The AMI ID used to launch the instance.
    AMI_ID = "meta-data/ami-id"
    # Launch order of the instance when several were started together; 0 for the first.
    AMI_LAUNCH_INDEX = "meta-data/ami-launch-index"
    AMI_MANIFEST_PATH = "meta-data/ami-manifest-path"
    # The virtual device that contains the root/boot file system.
    BLOCK_DEVICE_MAPPING_AMI = "meta-data/block-device-mapping/ami"
    HOSTNAME = "meta-data/hostname"
    INSTANCE_ID = "meta-data/instance-id"
    INSTANCE_TYPE = "meta-data/instance-type"
    LOCAL_HOSTNAME = "meta-data/local-hostname"
    LOCAL_IPV4 = "meta-data/local-ipv4"
    # Only set when the VPC has enableDnsHostnames; 404 otherwise.
    PUBLIC_HOSTNAME = "meta-data/public-hostname"
    # The Elastic IP address when one is associated.
    PUBLIC_IPV4 = "meta-data/public-ipv4"
    PUBLIC_KEYS = "meta-data/public-keys"
    PROFILE = "meta-data/profile"
    RESERVATION_ID = "meta-data/reservation-id"
    MAC = "meta-data/mac"
    SECURITY_GROUPS = "meta-data/security-groups"
    AVAILABILITY_ZONE = "meta-data/placement/availability-zone"
    REGION = "meta-data/placement/region"

    @property
    def path(self) -> str:
        return self.value

    @property
    def cli_name(self) -> str:
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_name(cls, name: str) -> "IMDSCommand":
        """Look a command up by member name (``INSTANCE_ID``) or CLI name (``instance-id``)."""

        key = name.strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            valid = ", ".join(command.cli_name for command in cls)
            raise ValueError(f"Unknown metadata command '{name}'. Valid commands: {valid}") from None


def resolve(command: IMDSCommand) -> str:
    return command.path
