"""Simple EC2 Manager for the stack security group and instance."""

import time
from typing import Any, Dict, List, Optional, Sequence

import boto3
from botocore.exceptions import ClientError

from webhost_ops.core.constants import INSTANCE_PROFILE_RETRY_INTERVAL, STACK_TAG_KEY
from webhost_ops.utils.aws_utils import error_code, flatten_reservations, is_error
from webhost_ops.utils.logger import setup_logger

LIVE_INSTANCE_STATES = ["pending", "running", "stopping", "stopped"]


def missing_ingress_ports(
    permissions: List[Dict[str, Any]], ports: Sequence[int], cidr: str
) -> List[int]:
    """Ports from ports that no tcp (or all-traffic) rule opens to cidr."""
    open_ports = set()
    for permission in permissions or []:
        protocol = str(permission.get("IpProtocol", ""))
        if protocol not in ("tcp", "6", "-1"):
            continue
        sources = [r.get("CidrIp") for r in permission.get("IpRanges", [])]
        sources += [r.get("CidrIpv6") for r in permission.get("Ipv6Ranges", [])]
        if cidr not in sources:
            continue
        for port in ports:
            from_port = permission.get("FromPort", 0)
            to_port = permission.get("ToPort", -1)
            if protocol == "-1" or from_port <= port <= to_port:
                open_ports.add(port)
    return [port for port in ports if port not in open_ports]


class EC2Manager:
    """Simple AWS EC2 resource manager."""

    def __init__(self, session: boto3.Session, region: str):
        """Initialize EC2Manager."""
        self.session = session
        self.region = region
        self.ec2_client = session.client("ec2", region_name=region)
        self.logger = setup_logger(__name__, "ec2_manager.log")

    # Network

    def get_default_vpc_id(self) -> Optional[str]:
        response = self.ec2_client.describe_vpcs(
            Filters=[{"Name": "isDefault", "Values": ["true"]}]
        )
        vpcs = response.get("Vpcs", [])
        return vpcs[0]["VpcId"] if vpcs else None

    def find_security_group(self, group_name: str, vpc_id: str) -> Optional[Dict[str, Any]]:
        response = self.ec2_client.describe_security_groups(
            Filters=[
                {"Name": "group-name", "Values": [group_name]},
                {"Name": "vpc-id", "Values": [vpc_id]},
            ]
        )
        groups = response.get("SecurityGroups", [])
        return groups[0] if groups else None

    def create_security_group(
        self, group_name: str, vpc_id: str, tags: List[Dict[str, str]], description: str = ""
    ) -> str:
        response = self.ec2_client.create_security_group(
            GroupName=group_name,
            Description=description or f"Web host access for {group_name}",
            VpcId=vpc_id,
            TagSpecifications=[{"ResourceType": "security-group", "Tags": tags}],
        )
        group_id = response["GroupId"]
        self.logger.info(f"Created security group {group_name} ({group_id}) in {vpc_id}")
        return group_id

    def authorize_ingress(self, group_id: str, ports: Sequence[int], cidr: str) -> None:
        """Open each TCP port to cidr."""
        permissions = [
            {
                "IpProtocol": "tcp",
                "FromPort": port,
                "ToPort": port,
                "IpRanges": [{"CidrIp": cidr, "Description": f"tcp/{port}"}],
            }
            for port in ports
        ]
        self.ec2_client.authorize_security_group_ingress(
            GroupId=group_id, IpPermissions=permissions
        )
        self.logger.info(f"Opened tcp ports {list(ports)} from {cidr} on {group_id}")

    def delete_security_group(self, group_id: str) -> None:
        self.ec2_client.delete_security_group(GroupId=group_id)
        self.logger.info(f"Deleted security group {group_id}")

    # Instances

    def find_stack_instance(self, stack_name: str) -> Optional[Dict[str, Any]]:
        """Return the stack's non-terminated instance, if any."""
        response = self.ec2_client.describe_instances(
            Filters=[
                {"Name": f"tag:{STACK_TAG_KEY}", "Values": [stack_name]},
                {"Name": "instance-state-name", "Values": LIVE_INSTANCE_STATES},
            ]
        )
        instances = flatten_reservations(response)
        if len(instances) > 1:
            self.logger.warning(
                f"Found {len(instances)} instances for stack {stack_name}, using the first"
            )
        return instances[0] if instances else None

    def describe_instance(self, instance_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.ec2_client.describe_instances(InstanceIds=[instance_id])
        except ClientError as e:
            if is_error(e, ("InvalidInstanceID.NotFound",)):
                return None
            raise
        instances = flatten_reservations(response)
        return instances[0] if instances else None

    def run_instance(
        self,
        ami_id: str,
        instance_type: str,
        security_group_id: str,
        instance_profile_name: str,
        user_data: str,
        tags: List[Dict[str, str]],
        key_name: Optional[str] = None,
        subnet_id: Optional[str] = None,
        profile_timeout: int = 0,
    ) -> Dict[str, Any]:
        """Launch one instance.

        A freshly created instance profile can take a while to become visible
        to EC2; launching is retried until profile_timeout seconds have passed.
        """
        params: Dict[str, Any] = {
            "ImageId": ami_id,
            "InstanceType": instance_type,
            "MinCount": 1,
            "MaxCount": 1,
            "SecurityGroupIds": [security_group_id],
            "IamInstanceProfile": {"Name": instance_profile_name},
            "UserData": user_data,
            "TagSpecifications": [
                {"ResourceType": "instance", "Tags": tags},
                {"ResourceType": "volume", "Tags": tags},
            ],
        }
        if key_name:
            params["KeyName"] = key_name
        if subnet_id:
            params["SubnetId"] = subnet_id

        deadline = time.monotonic() + profile_timeout
        while True:
            try:
                response = self.ec2_client.run_instances(**params)
                break
            except ClientError as e:
                if not self._is_profile_propagation_error(e) or time.monotonic() >= deadline:
                    raise
                self.logger.info(
                    f"Instance profile {instance_profile_name} not yet usable by EC2, "
                    f"retrying in {INSTANCE_PROFILE_RETRY_INTERVAL}s"
                )
                time.sleep(INSTANCE_PROFILE_RETRY_INTERVAL)

        instance = response["Instances"][0]
        self.logger.info(f"Launched instance {instance['InstanceId']} from {ami_id}")
        return instance

    @staticmethod
    def _is_profile_propagation_error(error: ClientError) -> bool:
        message = error.response.get("Error", {}).get("Message", "")
        return error_code(error) == "InvalidParameterValue" and "iamInstanceProfile" in message

    def wait_until_running(self, instance_id: str) -> Dict[str, Any]:
        self.ec2_client.get_waiter("instance_running").wait(InstanceIds=[instance_id])
        return self.describe_instance(instance_id) or {}

    def terminate_instance(self, instance_id: str, wait: bool = True) -> None:
        self.ec2_client.terminate_instances(InstanceIds=[instance_id])
        self.logger.info(f"Terminating instance {instance_id}")
        if wait:
            self.ec2_client.get_waiter("instance_terminated").wait(InstanceIds=[instance_id])
            self.logger.info(f"Instance {instance_id} terminated")


def create_ec2_manager(session: boto3.Session, region: str) -> EC2Manager:
    """Create EC2Manager instance."""
    return EC2Manager(session, region)
