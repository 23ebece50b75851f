"""Server settings by category, their merging from payloads, and the generated schema."""