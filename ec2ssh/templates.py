"""Default display templates and the starter configuration file."""

DEFAULT_LIST_TEMPLATE = "{instance_id}: {tags[Name]}"

DEFAULT_PREVIEW_TEMPLATE = """\
Instance Id: {instance_id}
Name:        {tags[Name]}
State:       {state}
Region:      {region}
Type:        {instance_type}
Private IP:  {private_ip}
Public IP:   {public_ip}
Public DNS:  {public_dns}

Tags:
{tag_lines}"""

CONFIG_TEMPLATE = """\
# ec2-ssh configuration
#
# Values here override built-in defaults; command-line flags override both.
# OmegaConf interpolation is supported, e.g. ${vars.team}.

# Regions queried in parallel. Defaults to the profile's region, or us-east-1.
# regions:
#   - us-east-1
#   - eu-west-1

# Connect to private addresses (true) or public DNS/IP (false).
use_private_ip: true

# Extra DescribeInstances filters, one Name=Value per entry.
# filters:
#   - tag:Team=platform

# Finder line and preview. Fields: instance_id, name, state, region,
# instance_type, private_ip, public_ip, public_dns, tags[KEY], tag_lines.
# template: "{instance_id}: {tags[Name]}"

# Instances carrying this tag are reached through SSM Session Manager.
ssm:
  tag_key: ""
  tag_value: ""
  command: bash -l
"""
