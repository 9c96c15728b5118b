"""
Conversion - Mapping sémantique OpenTelemetry

Table de correspondance entre les clés des conventions sémantiques
OpenTelemetry et les labels reconnus par Cloud Trace (affichés dans la
console: méthode HTTP, code retour, pod Kubernetes, etc.).
"""

from typing import Dict


def opentelemetry_semantic_mapping() -> Dict[str, str]:
    """
    Retourne le mapping conventions OpenTelemetry -> labels Cloud Trace.

    Returns:
        Nouveau dictionnaire (modifiable par l'appelant)

    Example:
        mapping = opentelemetry_semantic_mapping()
        assert mapping["http.method"] == "/http/method"
    """
    return {
        "otel.component.type": "/component",
        "exception.message": "/error/message",
        "exception.type": "/error/name",
        "network.protocol.version": "/http/client_protocol",
        "server.address": "/http/host",
        "client.address": "/http/host",
        "http.host": "/http/host",
        "http.method": "/http/method",
        "http.request.method": "/http/method",
        # Hors convention, mais répandu
        "http.path": "/http/path",
        "url.path": "/http/path",
        "http.request.size": "/http/request/size",
        "http.response.size": "/http/response/size",
        "http.route": "/http/route",
        "http.response.status_code": "/http/status_code",
        "http.status_code": "/http/status_code",
        "http.user_agent": "/http/user_agent",
        "user_agent.original": "/http/user_agent",
        "k8s.cluster.name": "g.co/r/k8s_container/cluster_name",
        "k8s.namespace.name": "g.co/r/k8s_container/namespace",
        "k8s.pod.name": "g.co/r/k8s_container/pod_name",
        "k8s.container.name": "g.co/r/k8s_container/container_name",
    }
