"""
tell - stream answers from a local language model to the terminal.

Sends a prompt to a locally running Ollama server, prints the generated
text as it arrives and remembers which model to use between runs.
"""

__version__ = "0.1.0"
