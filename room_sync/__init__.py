"""
Webex Room Sync - Copy missing members from one Webex room into another.

This package fetches the member rosters of a source and a destination room,
adds every source member the destination is missing, and reports the outcome
from the command line or an AWS Lambda function.
"""

__version__ = "1.0.0"
