"""Reading and writing of the vSphere cloud provider configuration in YAML and INI form."""