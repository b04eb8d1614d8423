# Services orchestrate domain logic with injected ports
