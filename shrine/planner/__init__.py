"""Loading, resolution, collision checks, ordering and planning of shrine deployments."""