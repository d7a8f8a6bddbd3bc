"""Text generation providers for query planning."""

from docseek.generators.transformers_generator import GeneratorConfig, TransformersGenerator

__all__ = ["GeneratorConfig", "TransformersGenerator"]
