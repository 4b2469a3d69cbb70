"""
NIM Proxy - passerelle OpenAI → NVIDIA NIM.
"""

__version__ = "1.0.0"
