from abc import ABC, abstractmethod


class TransportSecurity(ABC):
    """Port telling the payment layer whether the active transport is secure."""

    @abstractmethod
    def is_secure(self) -> bool:
        raise NotImplementedError
