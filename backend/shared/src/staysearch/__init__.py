"""StaySearch core: hotel availability search over DynamoDB.

Contains the domain models, the data-access layer and the services used by
the HTTP API.
"""

__version__ = "0.1.0"
