import json
from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class BaseModel:
    """
    Base model class for httpcall models.

    This class provides common functionality for all models,
    including methods to convert the model to a dictionary or JSON string.
    """

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the model instance to a dictionary.

        Returns:
        -------
        Dict[str, Any]:
            A dictionary representation of the model, excluding None values.
        """
        return {k: v for k, v in asdict(self).items() if v is not None}

    def to_json(self) -> str:
        """
        Convert the model instance to a JSON string.

        Returns:
        -------
        str:
            A JSON string representation of the model, excluding None values.
        """
        return json.dumps(self.to_dict())


@dataclass
class HTTPClientCallResponse(BaseModel):
    """
    Result envelope returned by HTTPClientCall.do_with_unmarshal.

    The decoded body is written into the caller's target, so the envelope only
    carries what is left: the response status code.

    Attributes:
    -----------
    status_code: int
        The HTTP status code of the response.
    """

    status_code: int
