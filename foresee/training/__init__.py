"""
Training layer

- engines : how one model is fitted / scored / cross-validated
- steps   : which engine runs at which point of a run
- pipeline: runs the steps over one TrainingContext
"""
