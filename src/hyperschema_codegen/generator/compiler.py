"""Adapter for the external schema-to-declarations compiler.

The compiler is any command that takes the path of a JSON schema file as
its last argument and prints TypeScript declarations on stdout, e.g.
`npx hyperschema-to-ts`.
"""

import json
import logging
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Callable

from hyperschema_codegen.errors import CompilerError

logger = logging.getLogger(__name__)

CompileDeclarations = Callable[[dict], str]


class CommandCompiler:
    """Runs a compiler command over a schema written to a temp directory."""

    def __init__(self, command: str):
        self.command = shlex.split(command)

    def __call__(self, schema: dict) -> str:
        with tempfile.TemporaryDirectory() as tmpdir:
            schema_path = Path(tmpdir) / "hyperschema.json"
            schema_path.write_text(json.dumps(schema, indent=2), encoding="utf-8")

            logger.info("Running %s", " ".join(self.command))
            result = subprocess.run(
                [*self.command, str(schema_path)],
                capture_output=True,
                text=True,
                cwd=tmpdir,
            )

        if result.returncode != 0:
            raise CompilerError(
                f"{self.command[0]} exited with status {result.returncode}: {result.stderr[:500]}"
            )
        return result.stdout
