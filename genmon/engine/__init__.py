"""The swarm engine — pure, synchronous decision and evolution rules.

- dna: genome generation, crossover, mutation, type inference
- scouting / analysis / concept: the three roles of a consensus cycle
- consensus: one scout -> analyst -> launcher pass
- learning / selection / breeding: the slow evolution loop

Nothing in here performs I/O. Randomness comes from an injectable
``random.Random`` so any run can be replayed from a seed.
"""
