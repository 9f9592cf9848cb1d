from paperclip import exceptions
from paperclip import optmanager

CONF_PATH = "~/.paperclip/config.yaml"


class Options(optmanager.OptManager):
    def __init__(self, **kwargs) -> None:
        super().__init__()
        self.add_option(
            "http_method",
            str,
            "POST",
            """
            HTTP method of the upload request. Use PUT or PATCH to update an
            existing record instead of creating a new one.
            """,
            choices=("POST", "PUT", "PATCH"),
        )
        self.add_option(
            "fallback_quality",
            float,
            1.0,
            """
            JPEG quality in [0.0, 1.0] used when the requested quality is out of range.
            """,
        )
        self.add_option(
            "check_boundary_collision",
            bool,
            True,
            """
            Make sure that the multipart boundary does not occur within the
            uploaded image or the attribute values, and generate a new one if it does.
            """,
        )
        self.add_option(
            "boundary_attempts",
            int,
            16,
            "Number of boundaries to try before giving up on a colliding upload.",
        )
        self.update(**kwargs)

    def validate(self) -> None:
        if not 0.0 <= self._options["fallback_quality"].current() <= 1.0:
            raise exceptions.OptionsError("fallback_quality must be within [0.0, 1.0].")
        if self._options["boundary_attempts"].current() < 1:
            raise exceptions.OptionsError("boundary_attempts must be at least 1.")
