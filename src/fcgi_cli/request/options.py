"""
Request options for a single fcgi-cli invocation.

Contains the Pydantic model holding everything the command line decides:
where to connect, what to request, and where to write the response.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from fcgi_cli.errors.exceptions import ConfigurationError, EmptyRemoteNameError
from fcgi_cli.request.url import TargetUrl


class RequestOptions(BaseModel):
    """Validated options for one request/response exchange.

    Attributes:
        address: FastCGI server address, HOST:PORT or a Unix socket path
        url: URL describing the simulated request (never fetched)
        data: Literal request body
        document_root: Document root at the server (no trailing slash)
        script_name: Explicit SCRIPT_NAME
        pass_env: Extra environment variables to forward as parameters
        env_clear: Forward only variables listed in pass_env
        env_full: Forward the whole environment
        include_headers: Keep the response header block in the output
        fail_on_status: Fail without output when the Status is an error
        output_dir: Directory that output file names are relative to
        output_file: Write the response to this file instead of stdout
        remote_name: Name the output file after the last URL path segment
        dump_header_file: Write the response header block to this file
        stderr_file: Write the FastCGI STDERR stream to this file
        request_method: REQUEST_METHOD parameter

    Example:
        >>> options = RequestOptions(
        ...     address="127.0.0.1:9000",
        ...     url="https://example.com/app/show?id=5",
        ...     script_name="/app",
        ...     document_root="/srv/www",
        ... )
    """

    model_config = {"frozen": True}

    address: str = Field(
        ...,
        description="FastCGI server address (HOST:PORT or socket path)",
        min_length=1,
    )
    url: Optional[str] = Field(
        default=None,
        description="URL to be accessed",
    )
    data: Optional[str] = Field(
        default=None,
        description="Literal request body",
    )
    document_root: Optional[str] = Field(
        default=None,
        description="Document root at the server, without trailing slash",
    )
    script_name: Optional[str] = Field(
        default=None,
        description="Explicit SCRIPT_NAME",
    )
    pass_env: List[str] = Field(
        default_factory=list,
        description="Environment variables to forward in addition to the defaults",
    )
    env_clear: bool = False
    env_full: bool = False
    include_headers: bool = False
    fail_on_status: bool = False
    output_dir: Optional[Path] = None
    output_file: Optional[Path] = None
    remote_name: bool = False
    dump_header_file: Optional[Path] = None
    stderr_file: Optional[Path] = None
    request_method: str = Field(
        default="GET",
        description="REQUEST_METHOD parameter",
        min_length=1,
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        """Reject URLs that cannot describe a request."""
        if v is None:
            return v
        try:
            TargetUrl.parse(v)
        except ConfigurationError as e:
            raise ValueError(e.message)
        return v

    @model_validator(mode="after")
    def validate_combinations(self) -> "RequestOptions":
        """Enforce flags that exclude or require each other."""
        if self.env_clear and self.env_full:
            raise ValueError("--no-env and --full-env cannot be used together")
        if self.output_file is not None and self.remote_name:
            raise ValueError("--output and --remote-name cannot be used together")
        if self.remote_name and self.url is None:
            raise ValueError("--remote-name requires a URL")
        return self

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "RequestOptions":
        """Build options from parsed command line arguments.

        Raises:
            ConfigurationError: If the arguments do not form valid options
        """
        try:
            return cls(
                address=args.address,
                url=args.url,
                data=args.data,
                document_root=args.root,
                script_name=args.script,
                pass_env=args.pass_env or [],
                env_clear=args.no_env,
                env_full=args.full_env,
                include_headers=args.include,
                fail_on_status=args.fail,
                output_dir=args.output_dir,
                output_file=args.output,
                remote_name=args.remote_name,
                dump_header_file=args.dump_header,
                stderr_file=args.stderr,
                request_method=args.request,
            )
        except ValidationError as e:
            errors = "; ".join(err["msg"] for err in e.errors())
            raise ConfigurationError(f"Invalid options: {errors}", cause=e)

    def target_url(self) -> Optional[TargetUrl]:
        """Parsed URL, or None when no URL was given."""
        if self.url is None:
            return None
        return TargetUrl.parse(self.url)

    @property
    def needs_header_parsing(self) -> bool:
        """Whether routing the response requires splitting off the headers."""
        return (
            self.fail_on_status
            or not self.include_headers
            or self.dump_header_file is not None
        )

    def resolve_output_path(self, path: Path) -> Path:
        """Place a file name below output_dir when one is configured."""
        if self.output_dir is not None:
            return self.output_dir / path
        return Path(path)

    def output_path(self) -> Optional[Path]:
        """
        Destination file for the response body.

        Returns:
            Path of the output file, or None for standard output

        Raises:
            EmptyRemoteNameError: If remote_name is set and the URL path has
                no segment to name the file after
        """
        if self.remote_name:
            target = self.target_url()
            segment = target.last_path_segment() if target else None
            if not segment:
                raise EmptyRemoteNameError(self.url or "")
            return self.resolve_output_path(Path(segment))
        if self.output_file is not None:
            return self.resolve_output_path(self.output_file)
        return None

    def dump_header_path(self) -> Optional[Path]:
        if self.dump_header_file is None:
            return None
        return self.resolve_output_path(self.dump_header_file)

    def stderr_path(self) -> Optional[Path]:
        if self.stderr_file is None:
            return None
        return self.resolve_output_path(self.stderr_file)


__all__ = ["RequestOptions"]
