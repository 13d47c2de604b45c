import typing as t

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict


class DataModel(BaseModel):
    """
    A base class for the package's pydantic models. Documents carry arbitrary caller-supplied values, so
    :meth:`to_dict` runs the model through FastAPI's ``jsonable_encoder``, turning values like ``datetime``,
    ``UUID``, enums, and nested pydantic models into basic JSON-compatible Python types.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def to_dict(self, custom_encoder: t.Optional[t.Dict[t.Any, t.Callable[[t.Any], t.Any]]] = None, **kwargs):
        """
        Creates a dictionary representation of the model, encoding all values to basic Python data types. All
        keyword arguments are forwarded on to :meth:`pydantic.BaseModel.model_dump`.
        """
        # Dump first, so `jsonable_encoder` only ever sees plain containers and leaf values.
        d = self.model_dump(**kwargs)
        return jsonable_encoder(d, custom_encoder=custom_encoder or {})
