#!/usr/bin/env python3
"""
AWS utility functions for web host provisioning.

Shared helpers for reading API responses and classifying API errors,
used by the service managers and jobs.
"""

from typing import Dict, Iterable, List

from botocore.exceptions import ClientError


def error_code(error: ClientError) -> str:
    """
    Return the AWS error code of a ClientError.

    Example:
        if error_code(e) == "NoSuchEntity":
            return None
    """
    return error.response.get("Error", {}).get("Code", "")


def is_error(error: Exception, codes: Iterable[str]) -> bool:
    """True when error is a ClientError carrying one of the given codes."""
    return isinstance(error, ClientError) and error_code(error) in set(codes)


def get_instance_tags(instance: Dict) -> Dict[str, str]:
    """
    Extract tags from an EC2 resource as a key-value dictionary.

    Example:
        tags = get_instance_tags(instance)
        stack = tags.get('Stack', 'Unknown')
    """
    tags = {}
    for tag in instance.get("Tags", []):
        key = tag.get("Key")
        value = tag.get("Value")
        if key and value:
            tags[key] = value
    return tags


def format_instance_info(instance: Dict) -> Dict[str, str]:
    """
    Format instance information for logging and display.

    Example:
        info = format_instance_info(instance)
        print(f"Instance: {info['name']} ({info['id']}) - {info['state']}")
    """
    tags = get_instance_tags(instance)
    public_ip = instance.get("PublicIpAddress")

    return {
        "id": instance.get("InstanceId", "Unknown"),
        "name": tags.get("Name", "No Name Tag"),
        "state": instance.get("State", {}).get("Name", "Unknown"),
        "instance_type": instance.get("InstanceType", "Unknown"),
        "availability_zone": instance.get("Placement", {}).get(
            "AvailabilityZone", "Unknown"
        ),
        "private_ip": instance.get("PrivateIpAddress", "N/A"),
        "public_ip": public_ip or "N/A",
        "public_dns": instance.get("PublicDnsName") or "N/A",
        "url": f"http://{public_ip}/" if public_ip else "N/A",
    }


def flatten_reservations(response: Dict) -> List[Dict]:
    """Collect the instances of a DescribeInstances response."""
    instances = []
    for reservation in response.get("Reservations", []):
        for instance in reservation.get("Instances", []):
            instances.append(instance)
    return instances
