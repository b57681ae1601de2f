"""Domain protocols (ports).

Structural typing: adapters satisfy these protocols without inheriting
from them.
"""

from autocrud.domain.protocols.logger_protocol import LoggerProtocol
from autocrud.domain.protocols.record_store_protocol import RecordStoreProtocol
from autocrud.domain.protocols.validator_protocol import ValidatorProtocol

__all__ = ["LoggerProtocol", "RecordStoreProtocol", "ValidatorProtocol"]
