"""agora_diet: adapt VMH Diet Designer diets to AGORA-based models."""

__version__ = "0.1.0"
