"""
Project manifest and resource storage.

Datasets, test results and charts are written next to a project manifest
(<project>_manifest.json) that records every stored file, which tool created it
and with which inputs. Tools only ever load resources through the manifest.
"""

import json
import secrets
import inspect
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from statkit.infrastructure.supported_resource_types import TYPE_REGISTRY
from statkit.config import DATA_ROOT


def get_supported_resource_types() -> list[str]:
    """Return a list of supported resource types."""
    return list(TYPE_REGISTRY.keys())


def _get_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")


def _summarise_argument(value: Any) -> Any:
    """Manifest-friendly stand-in for a tool argument."""
    if isinstance(value, (str, int, float, bool, type(None))):
        return value
    if isinstance(value, (list, tuple)):
        return f"<{type(value).__name__} of length {len(value)}>"
    if isinstance(value, dict):
        return f"<dict with {len(value)} keys>"
    if hasattr(value, "shape"):
        return f"<{type(value).__name__} shape={value.shape}>"
    text = repr(value)
    return text if len(text) < 100 else f"<{type(value).__name__}>"


def _get_parent_info() -> dict:
    """Find the tool that called _store_resource and describe it.

    Walks up the stack past this module and returns the caller's function name,
    its arguments, the first docstring line and the module name.
    """
    unknown = {
        'function_name': 'unknown',
        'function_inputs': {},
        'docstring_first_line': 'unknown',
        'module': 'unknown',
    }
    stack = inspect.stack()
    parent_frame = next(
        (fi for fi in stack[2:] if not fi.filename.endswith('resources.py')),
        stack[2] if len(stack) > 2 else None,
    )
    if parent_frame is None:
        return unknown

    frame = parent_frame.frame
    function_name = parent_frame.function
    func_obj = frame.f_globals.get(function_name)

    docstring_first_line = None
    if func_obj is not None and getattr(func_obj, '__doc__', None):
        docstring_first_line = func_obj.__doc__.strip().split('\n')[0].strip()

    arginfo = inspect.getargvalues(frame)
    function_inputs = {name: _summarise_argument(arginfo.locals.get(name)) for name in arginfo.args}

    module = inspect.getmodule(frame)
    return {
        'function_name': function_name,
        'function_inputs': function_inputs,
        'docstring_first_line': docstring_first_line,
        'module': module.__name__ if module else None,
    }


def _generate_id(type_tag: str) -> str:
    """Generate unique resource ID suffix: _{8_hex_chars}{extension}."""
    rand = secrets.token_hex(4).upper()
    return f"_{rand}{TYPE_REGISTRY[type_tag]['ext']}"


def _store_resource(obj: Any, project_manifest_path: str, filename: str, explanation: str, type_tag: str) -> str:
    """Internal: Store object next to the manifest with a unique ID and track it.

    The stored file is named {filename}_{8_hex_chars}{ext}, e.g.
    "ttest_result_A3F2B1D4.json", so repeated calls never overwrite each other.

    Args:
        obj: DataFrame (csv), dict (json) or PNG bytes (png)
        project_manifest_path: Full path to the project manifest
        filename: Base filename without extension
        explanation: Brief description of what this resource contains
        type_tag: Resource type from TYPE_REGISTRY

    Returns:
        The stored filename (with unique ID and extension) as tracked in the manifest.

    Raises:
        ValueError: If type_tag is not supported
        FileNotFoundError: If the project manifest does not exist
    """
    if type_tag not in TYPE_REGISTRY:
        raise ValueError(f"Unsupported resource type: {type_tag}. Supported: {get_supported_resource_types()}")
    _check_if_manifest_exists(project_manifest_path)

    output_filename = f"{filename}{_generate_id(type_tag)}"
    path = Path(project_manifest_path).parent / output_filename

    save_fn: Callable[[Any, Path], None] = TYPE_REGISTRY[type_tag]['save']
    save_fn(obj, path)

    parent_info = _get_parent_info()
    add_to_project_manifest(
        project_manifest_path=project_manifest_path,
        filename=output_filename,
        type_tag=type_tag,
        explanation=explanation,
        timestamp=_get_timestamp(),
        parent_function_name=parent_info['function_name'],
        parent_function_inputs=parent_info['function_inputs'],
        module_name=parent_info['module'],
    )
    return output_filename


def _load_resource(project_manifest_path: str, filename: str) -> Any:
    """Internal: Load a tracked resource, using the manifest to find its type.

    Args:
        project_manifest_path: Full path to the project manifest
        filename: Filename exactly as recorded in the manifest

    Raises:
        FileNotFoundError: If the manifest or the resource file is missing
        ValueError: If the resource is not tracked in the manifest
    """
    manifest = read_project_manifest(project_manifest_path)
    resources = manifest.get("resources", [])

    resource_entry = next((res for res in resources if res["filename"] == filename), None)
    if resource_entry is None:
        raise ValueError(
            f"Resource '{filename}' not found in manifest at {project_manifest_path}. "
            f"Available resources: {[r['filename'] for r in resources]}."
        )

    type_tag = resource_entry["type_tag"]
    if type_tag not in TYPE_REGISTRY:
        raise ValueError(f"Unknown resource type '{type_tag}' in manifest for resource '{filename}'")

    path = Path(project_manifest_path).parent / resource_entry["filename"]
    if not path.exists():
        raise FileNotFoundError(f"Resource file '{filename}' not found at expected location: {path}")

    load_fn: Callable[[Path], Any] = TYPE_REGISTRY[type_tag]["load"]
    return load_fn(path)


def _write_manifest(project_manifest_path: str, manifest: dict) -> None:
    with open(project_manifest_path, "w") as f:
        json.dump(manifest, f, indent=4)


def create_project_manifest(path: str, project_name: str) -> dict:
    """Create a new project manifest to track datasets, results and charts in a directory.

    Creates <path>/<project_name>_manifest.json. Create a manifest BEFORE importing
    data: every statkit tool takes the manifest path and loads its inputs through it.
    The default data directory can be found using check_default_data_dir().

    Args:
        path: Directory where manifest and data files will be stored (created if missing)
        project_name: Name for this project (used in manifest filename)

    Returns:
        dict with project_name, created_at timestamp, and empty resources list

    Raises:
        FileExistsError: If manifest already exists at this location
    """
    project_manifest_path = Path(path) / f"{project_name}_manifest.json"
    if project_manifest_path.exists():
        raise FileExistsError(f"Project manifest already exists at {project_manifest_path}")

    Path(path).mkdir(parents=True, exist_ok=True)
    manifest = {
        "project_name": project_name,
        "created_at": _get_timestamp(),
        "resources": []
    }
    _write_manifest(project_manifest_path, manifest)
    return manifest


def read_project_manifest(project_manifest_path: str) -> dict:
    """Read and return the complete project manifest with all tracked resources.

    Returns:
        dict with project_name, created_at and the list of tracked resources

    Raises:
        FileNotFoundError: If no manifest exists at this path
    """
    _check_if_manifest_exists(project_manifest_path)
    with open(project_manifest_path, "r") as f:
        return json.load(f)


def _check_if_manifest_exists(project_manifest_path: str) -> bool:
    if Path(project_manifest_path).exists():
        return True
    raise FileNotFoundError(
        f"Project manifest not found at {project_manifest_path}. Please supply the correct path or "
        f"create a new project manifest using create_project_manifest. "
        f"The default data directory is located at {DATA_ROOT}"
    )


def add_to_project_manifest(project_manifest_path: str, filename: str, type_tag: str, explanation: str | None = 'unknown',
                            timestamp: str | None = None, parent_function_name: str | None = 'unknown',
                            parent_function_inputs: dict | str | None = 'unknown', module_name: str | None = 'unknown') -> None:
    """Add a resource entry to the project manifest for tracking.

    Use this for files placed in the project directory by hand (see
    list_untracked_resources_in_project). Resources written by statkit tools are
    tracked automatically.

    Args:
        project_manifest_path: Full path to the project manifest
        filename: Name of the file in the project directory
        type_tag: Resource type (csv, json, png)
        explanation: Brief 1-sentence description of what this resource contains
        timestamp: Optional timestamp (auto-generated if None)

    Raises:
        FileNotFoundError: If manifest doesn't exist
    """
    manifest = read_project_manifest(project_manifest_path)
    manifest["resources"].append({
        "filename": filename,
        "type_tag": type_tag,
        "explanation": explanation,
        "timestamp": timestamp if timestamp is not None else _get_timestamp(),
        "parent_function_name": parent_function_name,
        "parent_function_inputs": parent_function_inputs,
        "module_name": module_name
    })
    _write_manifest(project_manifest_path, manifest)


def remove_from_project_manifest(project_manifest_path: str, resource_name: str, delete_file: bool = False) -> dict | None:
    """Stop tracking a resource in the project manifest (optionally delete the file).

    Args:
        project_manifest_path: Full path to the project manifest
        resource_name: Filename of the resource to untrack
        delete_file: If True, also delete the file from disk (default: False)

    Returns:
        The removed resource entry, or None if it was not tracked
    """
    manifest = read_project_manifest(project_manifest_path)
    removed_resource = None
    kept = []
    for res in manifest.get("resources", []):
        if res["filename"] == resource_name and removed_resource is None:
            removed_resource = res
        else:
            kept.append(res)

    if removed_resource is not None and delete_file:
        file_path = Path(project_manifest_path).parent / resource_name
        if file_path.exists():
            file_path.unlink()

    manifest["resources"] = kept
    _write_manifest(project_manifest_path, manifest)
    return removed_resource


def list_untracked_resources_in_project(project_manifest_path: str) -> list[str]:
    """List files in the project directory that are not tracked in the manifest."""
    manifest = read_project_manifest(project_manifest_path)
    data_dir = Path(project_manifest_path).parent
    all_files = {f.name for f in data_dir.iterdir() if f.is_file()}
    tracked_files = {res["filename"] for res in manifest.get("resources", [])}
    # the manifest itself is never a resource
    all_files.discard(Path(project_manifest_path).name)
    return sorted(all_files - tracked_files)


def check_default_data_dir() -> str:
    """Get the default data directory for project manifests and resources.

    This is ~/.statkit unless overridden by the STATKIT_DATA_DIR environment variable.
    """
    return str(DATA_ROOT)


def check_data_directory_content(data_directory_path: str) -> dict[str, Any]:
    """List the project manifests in a directory and the resources each one tracks.

    Returns:
        dict with n_projects, projects (manifest_path, project_name, n_resources,
        resources) and a summary message
    """
    data_dir = Path(data_directory_path)
    if not data_dir.is_dir():
        return {
            "n_projects": 0,
            "projects": [],
            "message": f"Not an existing directory: {data_directory_path}"
        }

    projects = []
    for manifest_path in sorted(data_dir.glob("*_manifest.json")):
        try:
            with open(manifest_path, "r") as f:
                manifest = json.load(f)
        except json.JSONDecodeError as e:
            projects.append({
                "manifest_path": str(manifest_path),
                "project_name": "Error reading manifest",
                "n_resources": 0,
                "resources": [],
                "error": str(e)
            })
            continue
        resources = manifest.get("resources", [])
        projects.append({
            "manifest_path": str(manifest_path),
            "project_name": manifest.get("project_name", "Unknown"),
            "n_resources": len(resources),
            "resources": [res["filename"] for res in resources]
        })

    if not projects:
        message = f"No project manifests found in {data_directory_path}"
    else:
        total_resources = sum(p['n_resources'] for p in projects)
        message = f"Found {len(projects)} project(s) with {total_resources} total tracked resources"

    return {
        "n_projects": len(projects),
        "projects": projects,
        "message": message
    }


def get_all_resources_tools() -> list[Callable]:
    """Return list of all resource management tools for MCP server."""
    return [
        create_project_manifest,
        read_project_manifest,
        add_to_project_manifest,
        remove_from_project_manifest,
        list_untracked_resources_in_project,
        get_supported_resource_types,
        check_default_data_dir,
        check_data_directory_content
    ]
