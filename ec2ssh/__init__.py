"""ec2ssh - fuzzy-find EC2 instances and open shell sessions to them."""

__version__ = "0.1.0"
