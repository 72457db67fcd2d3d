from .responder import SemanticBridgeError, SemanticResponder, local_semantic_response

__all__ = ["SemanticBridgeError", "SemanticResponder", "local_semantic_response"]
