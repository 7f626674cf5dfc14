"""Data models for cluster signatures, cloud resources and reclamation runs."""
