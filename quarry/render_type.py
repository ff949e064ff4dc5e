"""Logic for rendering rustdoc type trees as source-like text."""

from typing import Any

UNIT = "()"
UNKNOWN = "?"


def render_type(ty: Any) -> str:
    """Render a rustdoc type as it would be written in source.

    Paths are kept exactly as written at the declaration site.
    """
    if ty is None:
        return UNIT
    if not isinstance(ty, dict):
        return UNKNOWN

    if "primitive" in ty:
        return ty["primitive"]
    if "generic" in ty:
        return ty["generic"]
    if "resolved_path" in ty:
        return render_path(ty["resolved_path"])
    if "qualified_path" in ty:
        qp = ty["qualified_path"]
        self_type = render_type(qp.get("self_type"))
        trait = qp.get("trait")
        assoc = qp.get("name", "")
        assoc_args = render_generic_args(qp.get("args"))
        if trait:
            return f"<{self_type} as {render_path(trait)}>::{assoc}{assoc_args}"
        return f"{self_type}::{assoc}{assoc_args}"
    if "borrowed_ref" in ty:
        br = ty["borrowed_ref"]
        lt = f"{br['lifetime']} " if br.get("lifetime") else ""
        mut = "mut " if _is_mutable(br) else ""
        return f"&{lt}{mut}{render_type(br.get('type'))}"
    if "raw_pointer" in ty:
        rp = ty["raw_pointer"]
        mut = "mut" if _is_mutable(rp) else "const"
        return f"*{mut} {render_type(rp.get('type'))}"
    if "slice" in ty:
        return f"[{render_type(ty['slice'])}]"
    if "array" in ty:
        arr = ty["array"]
        return f"[{render_type(arr.get('type'))}; {arr.get('len', '_')}]"
    if "pat" in ty:
        return render_type(ty["pat"].get("type"))
    if "tuple" in ty:
        parts = [render_type(t) for t in ty["tuple"]]
        if len(parts) == 1:
            return f"({parts[0]},)"
        return f"({', '.join(parts)})"
    if "impl_trait" in ty:
        return f"impl {render_bounds(ty['impl_trait'])}"
    if "dyn_trait" in ty:
        dyn = ty["dyn_trait"]
        traits = [_render_poly_trait(poly) for poly in dyn.get("traits", [])]
        if dyn.get("lifetime"):
            traits.append(dyn["lifetime"])
        return f"dyn {' + '.join(traits)}"
    if "function_pointer" in ty:
        return _render_fn_pointer(ty["function_pointer"])
    if "infer" in ty:
        return "_"

    return UNKNOWN


def render_path(path: dict[str, Any]) -> str:
    """Render a resolved path with its generic arguments."""
    # `name` was renamed to `path` in later format versions.
    name = path.get("path") or path.get("name") or UNKNOWN
    return f"{name}{render_generic_args(path.get('args'))}"


def render_generic_args(args: Any) -> str:
    """Render `<...>` or `(...) -> ...` generic arguments."""
    if not isinstance(args, dict):
        return ""
    if "angle_bracketed" in args:
        ab = args["angle_bracketed"]
        parts = []
        for arg in ab.get("args", []):
            if "type" in arg:
                parts.append(render_type(arg["type"]))
            elif "lifetime" in arg:
                parts.append(arg["lifetime"])
            elif "const" in arg:
                const = arg["const"]
                value = const.get("expr") if isinstance(const, dict) else const
                parts.append(str(value))
            elif "infer" in arg:
                parts.append("_")
        # Older formats call these `bindings`.
        for c in ab.get("constraints", ab.get("bindings", [])):
            name = c.get("name", "")
            binding = c.get("binding", {})
            if "equality" in binding:
                term = binding["equality"]
                rendered = render_type(term.get("type")) if "type" in term else term
                parts.append(f"{name} = {rendered}")
            elif "constraint" in binding:
                parts.append(f"{name}: {render_bounds(binding['constraint'])}")
        if parts:
            return f"<{', '.join(parts)}>"
        return ""
    if "parenthesized" in args:
        p = args["parenthesized"]
        inputs = ", ".join(render_type(t) for t in p.get("inputs", []))
        output = p.get("output")
        ret = f" -> {render_type(output)}" if output is not None else ""
        return f"({inputs}){ret}"
    return ""


def render_bounds(bounds: list[dict[str, Any]]) -> str:
    """Render generic bounds joined with `+`."""
    parts = []
    for bound in bounds:
        if "trait_bound" in bound:
            tb = bound["trait_bound"]
            modifier = "?" if tb.get("modifier") == "maybe" else ""
            parts.append(f"{modifier}{render_path(tb['trait'])}")
        elif "outlives" in bound:
            parts.append(bound["outlives"])
    return " + ".join(parts)


def generic_param_names(generics: Any) -> tuple[str, ...]:
    """Return the declared generic parameter names, lifetimes included."""
    if not isinstance(generics, dict):
        return ()
    names = []
    for param in generics.get("params", []):
        kind = param.get("kind", {})
        ty = kind.get("type") if isinstance(kind, dict) else None
        if isinstance(ty, dict) and (ty.get("is_synthetic") or ty.get("synthetic")):
            continue
        if param.get("name"):
            names.append(param["name"])
    return tuple(names)


def _is_mutable(node: dict[str, Any]) -> bool:
    # Older formats use `mutable`.
    return bool(node.get("is_mutable", node.get("mutable", False)))


def _render_poly_trait(poly: dict[str, Any]) -> str:
    trait = poly.get("trait", {})
    rendered = render_path(trait)
    lifetimes = [p["name"] for p in poly.get("generic_params", []) if p.get("name")]
    if lifetimes:
        return f"for<{', '.join(lifetimes)}> {rendered}"
    return rendered


def _render_fn_pointer(fp: dict[str, Any]) -> str:
    sig = fp.get("sig") or fp.get("decl") or {}
    header = fp.get("header", {})
    prefix = "unsafe " if header.get("is_unsafe", header.get("unsafe")) else ""
    abi = header.get("abi", "Rust")
    if isinstance(abi, dict) and abi:
        abi = abi.get("Other") or next(iter(abi))
    if isinstance(abi, str) and abi != "Rust":
        prefix += f'extern "{abi}" '
    inputs = [render_type(t) for _, t in sig.get("inputs", [])]
    if sig.get("is_c_variadic", sig.get("c_variadic")):
        inputs.append("...")
    output = sig.get("output")
    ret = f" -> {render_type(output)}" if output is not None else ""
    return f"{prefix}fn({', '.join(inputs)}){ret}"
