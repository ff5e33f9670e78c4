"""JSON form handling for the admin screens.

A form is a pydantic model. ``GET`` shows it blank or pre-filled, ``POST``
validates the submitted body: a valid submission is returned for the route to
persist, an invalid one comes back as a :class:`FormView` carrying the field
errors so the client can redisplay it (HTTP 200).
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ValidationError
from starlette.requests import Request
from starlette.responses import RedirectResponse

from catalog.core.schemas import FormView


FormT = TypeVar("FormT", bound=BaseModel)

_VALUE_ERROR_PREFIX = "Value error, "
# never echoed back to the client
_HIDDEN_FIELDS = frozenset({"password", "plain_password"})


def form_name(form_cls: Type[BaseModel]) -> str:
    name = form_cls.__name__
    return name[:-4].lower() if name.endswith("Form") else name.lower()


def blank_form(form_cls: Type[BaseModel], initial: Optional[Mapping[str, Any]] = None) -> FormView:
    data: Dict[str, Any] = {name: None for name in form_cls.model_fields}
    for name, field in form_cls.model_fields.items():
        if not field.is_required():
            data[name] = field.get_default(call_default_factory=True)
    if initial:
        data.update({key: value for key, value in initial.items() if key in data})
    for name in data.keys() & _HIDDEN_FIELDS:
        data[name] = None
    return FormView(form=form_name(form_cls), data=jsonable_encoder(data))


def collect_errors(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else "form"
        message = error.get("msg", "Invalid value.")
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        errors.setdefault(field, []).append(message)
    return errors


def handle_form(
    form_cls: Type[FormT], payload: Mapping[str, Any]
) -> Tuple[Optional[FormT], FormView]:
    try:
        form = form_cls.model_validate(dict(payload))
    except ValidationError as exc:
        view = blank_form(form_cls, payload)
        view.submitted = True
        view.errors = collect_errors(exc)
        return None, view
    view = FormView(
        form=form_name(form_cls),
        data=jsonable_encoder(form.model_dump(exclude=set(_HIDDEN_FIELDS))),
        submitted=True,
        valid=True,
    )
    return form, view


def add_error(view: FormView, field: str, message: str) -> FormView:
    view.valid = False
    view.errors.setdefault(field, []).append(message)
    return view


def redirect_to(request: Request, route_name: str, **path_params: Any) -> RedirectResponse:
    url = request.url_for(route_name, **path_params)
    return RedirectResponse(url=str(url), status_code=303)
