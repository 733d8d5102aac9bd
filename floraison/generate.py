"""Top-level generation: a request in, flat mesh buffers out.

Can also be run as a script to write the buffers of a request file or a
preset flower to an ``.npz`` archive.
"""

import logging

from floraison.flower import FlowerParams, generate_flower
from floraison.inflorescence import generate_inflorescence
from floraison.mesh import GenerationResult
from floraison.params import GenerationRequest, load_request, parse_request

logger = logging.getLogger(__name__)

PRESETS = {
    "lily": FlowerParams.lily,
    "five_petal": FlowerParams.five_petal,
    "daisy": FlowerParams.daisy,
    "four_petal": FlowerParams.four_petal,
}


def generate(request) -> GenerationResult:
    """Generate the mesh described by ``request``.

    Args:
        request: GenerationRequest, or a request document (dict)

    Returns:
        GenerationResult with flat float32 attribute buffers and uint32 indices

    Raises:
        ParameterError: if the request document is malformed
        GeometryError: if the generated mesh fails validation
    """
    if not isinstance(request, GenerationRequest):
        request = parse_request(request)

    if request.inflorescence is None:
        mesh = generate_flower(request.flower)
    else:
        mesh = generate_inflorescence(request.inflorescence, request.flower, request.include_wilt)

    mesh.validate()
    logger.info("Generated %d vertices, %d triangles", mesh.vertex_count(), mesh.triangle_count())
    return mesh.to_buffers()


def generate_to_file(output: str, params_path: str = None, preset: str = "lily") -> GenerationResult:
    """Generate from a request file (or a preset flower) and save the buffers."""
    if params_path is not None:
        request = load_request(params_path)
    else:
        request = GenerationRequest(flower=PRESETS[preset]())
    result = generate(request)
    result.save(output)
    return result


if __name__ == "__main__":
    import argparse

    from floraison.logging_config import setup_logging

    parser = argparse.ArgumentParser(description="Generate a flower or inflorescence mesh")
    parser.add_argument("--params", default=None, help="JSON request file")
    parser.add_argument("--preset", default="lily", choices=sorted(PRESETS), help="Preset flower when no --params")
    parser.add_argument("--output", default="flower.npz", help="Output .npz file")
    parser.add_argument("--verbose", action="store_true", help="Log per-component details")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    result = generate_to_file(args.output, args.params, args.preset)
    print(f"Wrote {result.vertex_count} vertices, {result.triangle_count} triangles to {args.output}")
