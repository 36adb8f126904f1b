"""devops-tool-htmx (DTH).

Small control plane for canary releases running on Kubernetes:
 - derive the application view (deployments, tracks, reachable endpoints)
 - spawn a canary Deployment from the primary one
 - toggle whether the Service routes to both tracks or only to `main`

Everything is recomputed from the cluster on each request; nothing is stored locally.
"""
