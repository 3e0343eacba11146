from dbarrow.config.type_mapping import TypeMappingConfig
